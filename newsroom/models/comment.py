"""Comment model and its per-user reaction tables."""
from datetime import datetime
from newsroom.extensions import db

COMMENT_STATUSES = ['pending', 'approved', 'rejected', 'flagged']


class Comment(db.Model):
    __tablename__ = 'comments'

    id = db.Column(db.Integer, primary_key=True)
    content = db.Column(db.Text, nullable=False)
    article_id = db.Column(db.Integer, db.ForeignKey('articles.id', ondelete='CASCADE'), nullable=False)
    author_id = db.Column(db.String(128), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    parent_id = db.Column(db.Integer, db.ForeignKey('comments.id', ondelete='CASCADE'), nullable=True)
    status = db.Column(db.String(50), default='pending', nullable=False)  # pending, approved, rejected, flagged
    likes = db.Column(db.Integer, default=0)
    dislikes = db.Column(db.Integer, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    replies = db.relationship('Comment', backref=db.backref('parent', remote_side='Comment.id'),
                              cascade='all, delete')
    like_rows = db.relationship('CommentLike', lazy=True, cascade='all, delete')
    dislike_rows = db.relationship('CommentDislike', lazy=True, cascade='all, delete')
    reports = db.relationship('CommentReport', lazy=True, cascade='all, delete')

    def to_dict(self):
        return {
            'id': self.id,
            'content': self.content,
            'articleId': self.article_id,
            'authorId': self.author_id,
            'parentId': self.parent_id,
            'status': self.status,
            'likes': self.likes or 0,
            'dislikes': self.dislikes or 0,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }


class CommentLike(db.Model):
    __tablename__ = 'comment_likes'
    __table_args__ = (db.UniqueConstraint('comment_id', 'user_id'),)

    id = db.Column(db.Integer, primary_key=True)
    comment_id = db.Column(db.Integer, db.ForeignKey('comments.id', ondelete='CASCADE'), nullable=False)
    user_id = db.Column(db.String(128), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)


class CommentDislike(db.Model):
    __tablename__ = 'comment_dislikes'
    __table_args__ = (db.UniqueConstraint('comment_id', 'user_id'),)

    id = db.Column(db.Integer, primary_key=True)
    comment_id = db.Column(db.Integer, db.ForeignKey('comments.id', ondelete='CASCADE'), nullable=False)
    user_id = db.Column(db.String(128), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)


class CommentReport(db.Model):
    __tablename__ = 'comment_reports'
    __table_args__ = (db.UniqueConstraint('comment_id', 'user_id'),)

    id = db.Column(db.Integer, primary_key=True)
    comment_id = db.Column(db.Integer, db.ForeignKey('comments.id', ondelete='CASCADE'), nullable=False)
    user_id = db.Column(db.String(128), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    reason = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
