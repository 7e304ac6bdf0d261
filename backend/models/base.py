"""
Base model with common fields for all models.
Every table carries created_at / updated_at and serializes the same way.
"""
from datetime import date, datetime
from extensions import db


class BaseModel(db.Model):
    """
    Abstract base model that all other models inherit from.
    Contains the timestamp columns and the column-driven to_dict().
    """
    __abstract__ = True

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        """
        Convert model instance to dictionary.
        Keys are the column names, which is also the wire format.
        """
        result = {}
        for column in self.__table__.columns:
            value = getattr(self, column.name)

            # Handle date/datetime objects (convert to ISO format)
            if isinstance(value, (datetime, date)):
                value = value.isoformat()

            result[column.name] = value

        return result

    def update(self, **kwargs):
        """
        Update model fields from keyword arguments.
        Returns self for method chaining.

        Example: student.update(name='John Doe', age=12)
        """
        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)

        self.updated_at = datetime.utcnow()
        return self

    def __repr__(self):
        return f'<{self.__class__.__name__} {self.primary_key_value}>'

    @property
    def primary_key_value(self):
        return getattr(self, self.__mapper__.primary_key[0].name)
