import click
from datetime import timedelta

from phr.extensions import db
from phr.models.base import utcnow
from phr.models.user import User
from phr.models.vital import VitalRecord
from phr.services.documents import DocumentService
from phr.services.profile import ProfileService

demo_user = {
    "email": "demo@example.com",
    "password": "demo123",
    "phone_number": "9876543210",
}

demo_vitals = [
    {"blood_pressure_systolic": 118, "blood_pressure_diastolic": 76, "blood_sugar": 92.0, "heart_rate": 68},
    {"blood_pressure_systolic": 124, "blood_pressure_diastolic": 80, "blood_sugar": 105.5, "heart_rate": 72},
    {"blood_pressure_systolic": 121, "blood_pressure_diastolic": 79, "blood_sugar": 98.0, "heart_rate": 70},
]


def register_commands(app):
    """Register all custom CLI commands with the Flask app."""

    @app.cli.command("init-db")
    def init_db():
        """Creates all database tables from the models."""
        try:
            db.create_all()
            click.echo("Database tables created successfully!")
        except Exception as e:
            click.echo(f"Error creating database tables: {e}")

    @app.cli.command("seed-demo")
    def seed_demo():
        """Seeds a demo user with a profile and a few vital readings."""
        email = demo_user["email"]
        if User.query.filter_by(email=email).first():
            click.echo(f"  - User '{email}' already exists.")
            return

        user = User(email=email, phone_number=demo_user["phone_number"])
        user.set_password(demo_user["password"])
        db.session.add(user)
        db.session.commit()
        ProfileService.ensure_profile(user)

        now = utcnow()
        for days_ago, reading in enumerate(reversed(demo_vitals)):
            db.session.add(VitalRecord(user_id=user.id, recorded_at=now - timedelta(days=days_ago), **reading))
        db.session.commit()
        click.echo(f"  - User '{email}' created with {len(demo_vitals)} vital readings.")

    @app.cli.command("reconcile-documents")
    @click.option("--user-id", default=None, help="Only reconcile this user's documents.")
    def reconcile_documents(user_id):
        """Removes document rows whose stored file is gone or that were flagged."""
        result = DocumentService.reconcile(user_id)
        click.echo(f"Removed {result['flagged']} flagged and {result['missing']} dangling document(s).")
