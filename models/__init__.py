# models/__init__.py
# Import every model so Flask-Migrate sees the full metadata

from .user import User
from .event import Event
from .participant import Participant
from .event_registration import EventRegistration
from .judge import Judge
from .event_judge import EventJudge
from .evaluation_session import EvaluationSession
from .evaluation import Evaluation
from .event_log import EventLog
