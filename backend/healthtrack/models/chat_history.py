"""
Health assistant chat history.
"""
from datetime import datetime, timedelta
from healthtrack import db


class AIChatHistory(db.Model):
    """One question/answer exchange with the health assistant."""
    __tablename__ = 'ai_chat_history'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    message = db.Column(db.Text, nullable=False)
    response = db.Column(db.Text, nullable=False)
    timestamp = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    category = db.Column(db.String(50), nullable=True)

    @staticmethod
    def cleanup_older_than(days):
        """Delete exchanges older than the given number of days."""
        cutoff = datetime.utcnow() - timedelta(days=days)
        count = AIChatHistory.query.filter(
            AIChatHistory.timestamp < cutoff
        ).delete()
        db.session.commit()
        return count

    def __repr__(self):
        return f'<AIChatHistory {self.id} user={self.user_id}>'
