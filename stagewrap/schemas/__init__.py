from stagewrap.schemas.response import Response

__all__ = ["Response"]
