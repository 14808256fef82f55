"""User and UserPreferences models."""
from datetime import datetime
from newsroom.extensions import db

ROLES = ['user', 'admin', 'developer']


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.String(128), primary_key=True)  # OIDC subject
    email = db.Column(db.String(255), unique=True)
    first_name = db.Column(db.String(100))
    last_name = db.Column(db.String(100))
    username = db.Column(db.String(100), unique=True)
    bio = db.Column(db.Text)
    profile_image_url = db.Column(db.String(500))
    role = db.Column(db.String(20), default='user', nullable=False)  # user, admin, developer
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    preferences = db.relationship('UserPreferences', backref='user', uselist=False,
                                  cascade='all, delete')

    @property
    def display_name(self):
        if self.username:
            return self.username
        return f"{self.first_name or ''} {self.last_name or ''}".strip() or 'Unknown'

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'username': self.username,
            'bio': self.bio,
            'profileImageUrl': self.profile_image_url,
            'role': self.role,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }

    def to_author_dict(self):
        """Public author badge shown next to articles and comments."""
        return {
            'id': self.id,
            'name': self.display_name,
            'avatar': self.profile_image_url or '',
            'profileImageUrl': self.profile_image_url or '',
            'role': self.role or '',
        }


UNKNOWN_AUTHOR = {'id': '', 'name': 'Unknown', 'avatar': '', 'profileImageUrl': '', 'role': ''}


class UserPreferences(db.Model):
    __tablename__ = 'user_preferences'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(128), db.ForeignKey('users.id', ondelete='CASCADE'),
                        unique=True, nullable=False)
    newsletter = db.Column(db.Boolean, default=True)
    comment_replies = db.Column(db.Boolean, default=True)
    article_updates = db.Column(db.Boolean, default=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'newsletter': self.newsletter,
            'commentReplies': self.comment_replies,
            'articleUpdates': self.article_updates,
        }
