# phr/services/vitals.py
import logging

from phr.extensions import db
from phr.models.vital import VitalRecord
from phr.services.schemas import ValidationError, VitalReading, parse_form

logger = logging.getLogger(__name__)


class VitalsService:
    @staticmethod
    def list_vitals(owner_id, limit=None):
        """Records for the owner, newest first"""
        query = VitalRecord.query.filter_by(user_id=owner_id).order_by(VitalRecord.recorded_at.desc())
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def record_vital(owner_id, reading):
        if not isinstance(reading, VitalReading):
            reading = parse_form(VitalReading, reading)

        if not reading.present_fields():
            raise ValidationError('Please enter at least one measurement')

        record = VitalRecord(user_id=owner_id, **reading.model_dump())
        try:
            db.session.add(record)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        logger.info(f"Vital reading {record.id} recorded for {owner_id}")
        return record

    @staticmethod
    def chart_series(records):
        """Chart points oldest-first from newest-first records"""
        return [
            {
                'date': record.recorded_at.strftime('%Y-%m-%d'),
                'bloodPressure': record.blood_pressure_systolic,
                'heartRate': record.heart_rate,
                'bloodSugar': record.blood_sugar,
            }
            for record in reversed(records)
        ]
