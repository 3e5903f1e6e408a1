from datetime import datetime

from app import create_app
from extensions import db
from models import User, Event, Participant, EventRegistration, Judge, EventJudge, EvaluationSession, Evaluation, EventLog

# Build an app to get an application context
app = create_app()

with app.app_context():
    db.create_all()

    # --- 1. CLEAN UP ---
    print("Removing old data...")
    # Reverse dependency order
    db.session.query(Evaluation).delete()
    db.session.query(EvaluationSession).delete()
    db.session.query(EventJudge).delete()
    db.session.query(EventRegistration).delete()
    db.session.query(EventLog).delete()
    db.session.query(Event).delete()
    db.session.query(Judge).delete()
    db.session.query(Participant).delete()
    db.session.query(User).delete()
    db.session.commit()
    print("Clean up finished.")

    # --- 2. SAMPLE DATA ---
    print("Adding sample data...")

    try:
        admin = User(code='000001', nickname='Admin', role='admin')
        operator = User(code='100001', nickname='Mesa de voto', role='operator')
        db.session.add_all([admin, operator])
        db.session.commit()

        participants = [
            Participant(name='João Silva', email='joao.silva@email.com', category='fado',
                        experience='intermedio', status='approved'),
            Participant(name='Maria Costa', email='maria.costa@email.com', category='fado',
                        experience='avancado', status='approved', accepts_email_notifications=True),
            Participant(name='António Oliveira', email='antonio.oliveira@email.com', category='fado',
                        experience='intermedio', status='approved'),
            Participant(name='Ana Ferreira', email='ana.ferreira@email.com', category='concertina',
                        experience='avancado', status='pending'),
        ]
        db.session.add_all(participants)

        judges = [
            Judge(name='Rui Veloso', description='Músico e compositor'),
            Judge(name='Mariza', description='Fadista'),
            Judge(name='Carlos do Carmo', description='Fadista', is_active=False),
        ]
        db.session.add_all(judges)
        db.session.commit()

        # --- Events: one per phase of the fado category ---
        classificatoria = Event(
            name='Fado: Classificatória', type='classificatoria', category='fado', location='Coliseu',
            start_date=datetime(2025, 6, 1, 21, 0), status='ongoing', max_participants=20,
            created_by=admin.id,
        )
        semi_final = Event(
            name='Fado: Semi-Final', type='semi-final', category='fado', location='Coliseu',
            start_date=datetime(2025, 6, 15, 21, 0), status='published', created_by=admin.id,
        )
        final = Event(
            name='Fado: Final', type='final', category='fado', location='Praça do Município',
            start_date=datetime(2025, 6, 29, 21, 0), status='draft', created_by=admin.id,
        )
        db.session.add_all([classificatoria, semi_final, final])
        db.session.commit()

        for p in participants[:3]:
            db.session.add(EventRegistration(event_id=classificatoria.id, participant_id=p.id))
        classificatoria.current_participants = 3
        for j in judges[:2]:
            db.session.add(EventJudge(event_id=classificatoria.id, judge_id=j.id))
        db.session.commit()

        # Scores out of 100; the first judge's results are already public
        scores = [(0, 0, 85), (0, 1, 90), (1, 0, 78), (1, 1, 81), (2, 0, 92)]
        for judge_index, participant_index, score in scores:
            db.session.add(Evaluation(
                event_id=classificatoria.id,
                judge_id=judges[judge_index].id,
                participant_id=participants[participant_index].id,
                score=score,
                is_published=judge_index == 0,
            ))
        db.session.commit()

        print("Sample data added!")
    except Exception as e:
        db.session.rollback()
        print(f"Error while adding sample data: {e}")
