from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from farm_catalog.config import settings


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Creates a JWT token with the given claims

    IMPORTANT: the token must always carry:
    - role: "operator" or "farmer"
    - farm_id: the farm of a farmer (absent for operators)
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Decodes and validates a JWT token

    Raises:
        JWTError: if the token is invalid or expired
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        raise JWTError(f"Invalid token: {str(e)}")
