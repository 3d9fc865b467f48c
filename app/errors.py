from fastapi import HTTPException, status


class InvalidRequest(HTTPException):
    """요청 본문 디코딩 실패 (400)"""

    def __init__(self, detail: str = "failed to decode the request body as json"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class Unauthorized(HTTPException):
    """잘못된 자격 증명 또는 만료된 세션 (401)"""

    def __init__(self, detail: str = "invalid username or password"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class Forbidden(HTTPException):
    """세션 없음 또는 알 수 없는 세션 (403)"""

    def __init__(self, detail: str = ""):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str = "not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class StorageError(HTTPException):
    """DB/트랜잭션 오류 (500)"""

    def __init__(self, detail: str = "internal server error",
                 status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR):
        super().__init__(status_code=status_code, detail=detail)


class InternalError(StorageError):
    pass


class Conflict(StorageError):
    """UNIQUE 제약 위반 (409)"""

    def __init__(self, detail: str = "already exists"):
        super().__init__(detail=detail, status_code=status.HTTP_409_CONFLICT)
