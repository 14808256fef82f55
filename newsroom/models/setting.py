"""Setting model - runtime site configuration keyed by (section, key)."""
from datetime import datetime
from newsroom.extensions import db

SETTING_SECTIONS = ['general', 'users', 'advanced']


class Setting(db.Model):
    __tablename__ = 'settings'
    __table_args__ = (db.UniqueConstraint('section', 'key'),)

    id = db.Column(db.Integer, primary_key=True)
    section = db.Column(db.String(50), nullable=False)  # general, users, advanced
    key = db.Column(db.String(100), nullable=False)
    value = db.Column(db.JSON)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
