from datetime import datetime
from payroll_api.extensions import db

class ActivityLog(db.Model):
    """Append-only; rows are written as a side effect of mutations and never edited."""
    __tablename__ = "activity_logs"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    action = db.Column(db.String(120), nullable=False)
    details = db.Column(db.Text)
    timestamp = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)

    user = db.relationship("User")


class ExportRecord(db.Model):
    __tablename__ = "export_records"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    export_type = db.Column(db.String(60), nullable=False)   # all | earnings | Overtime | ...
    file_url = db.Column(db.String(500), nullable=False)
    file_format = db.Column(db.String(10), nullable=False, default="csv")
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    include_unapproved = db.Column(db.Boolean, nullable=False, default=False)
    record_count = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    user = db.relationship("User")
