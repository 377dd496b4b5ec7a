from sqlalchemy import Column, Integer, String
from examflow.database import Base, UTCDateTime, utcnow


class Student(Base):
    __tablename__ = "students"
    
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    roll_number = Column(String, nullable=True, index=True)
    email = Column(String, unique=True, index=True, nullable=True)
    created_at = Column(UTCDateTime, default=utcnow)
    
    def __repr__(self):
        return f"<Student {self.name} ({self.roll_number})>"
