"""
account_service package

Core backend logic for the account service:

- FastAPI application (`main.py`) and user routes (`routes/users.py`)
- SQLAlchemy models, database integration and the account store (`models.py`, `db.py`, `store.py`)
- Password hashing and JWT token lifecycle (`auth.py`)
- Session orchestration (`controller.py`)
- Pydantic schemas and settings (`schemas.py`, `config.py`)
"""
