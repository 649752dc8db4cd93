from models.base_model import Base, BaseModel
from sqlalchemy import Column, String

AGE_BRACKETS = ("under_18", "18_24", "25_34", "35_44", "45_54", "55_64", "65_plus")


class User(BaseModel, Base):
    # password_hash never leaves the store: responses go through UserOutSchema
    __tablename__ = "users"
    username = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    age = Column(String(16), nullable=True)
    password_hash = Column(String(255), nullable=False)
