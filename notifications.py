# notifications.py
# Outgoing email for participant review results

import logging
import smtplib
import ssl
from email.message import EmailMessage

from flask import current_app

logger = logging.getLogger(__name__)

APPROVED_SUBJECT = 'Som Popular: your registration was approved'
REJECTED_SUBJECT = 'Som Popular: your registration was not accepted'


def send_email(to_email, subject, text):
    config = current_app.config
    if not config.get('MAIL_ENABLED') or not config.get('MAIL_SERVER'):
        raise RuntimeError('Mail delivery is not configured')

    message = EmailMessage()
    message['From'] = config['MAIL_SENDER']
    message['To'] = to_email
    message['Subject'] = subject
    message.set_content(text)

    host, port = config['MAIL_SERVER'], config['MAIL_PORT']
    user, password = config.get('MAIL_USERNAME'), config.get('MAIL_PASSWORD')

    if config.get('MAIL_USE_SSL'):
        context = ssl.create_default_context()
        with smtplib.SMTP_SSL(host, port, context=context, timeout=20) as server:
            if user and password:
                server.login(user, password)
            server.send_message(message)
        logger.info("Email '%s' sent to %s", subject, to_email)
        return

    with smtplib.SMTP(host, port, timeout=20) as server:
        server.ehlo()
        if config.get('MAIL_USE_TLS'):
            server.starttls(context=ssl.create_default_context())
            server.ehlo()
        if user and password:
            server.login(user, password)
        server.send_message(message)
    logger.info("Email '%s' sent to %s", subject, to_email)


def notify_participant_status(participant):
    """Email the participant the outcome of their registration review."""
    if participant.status == 'approved':
        subject = APPROVED_SUBJECT
        body = (
            f'Hello {participant.name},\n\n'
            'Your registration for Som Popular has been approved. '
            'We will contact you with the schedule of your events.\n'
        )
    else:
        subject = REJECTED_SUBJECT
        body = f'Hello {participant.name},\n\nYour registration for Som Popular was not accepted.\n'
        if participant.rejection_reason:
            body += f'\nReason: {participant.rejection_reason}\n'
    send_email(participant.email, subject, body)
