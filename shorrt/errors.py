from fastapi import status


class ShortLinkError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ValidationError(ShortLinkError):
    status_code = status.HTTP_400_BAD_REQUEST


class DuplicateToken(ShortLinkError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, token: str):
        super().__init__(f"Short link '{token}' is already taken")
        self.token = token


class NotFound(ShortLinkError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, token: str):
        super().__init__("URL not found")
        self.token = token


class Expired(ShortLinkError):
    status_code = status.HTTP_410_GONE

    def __init__(self, token: str):
        super().__init__("URL has expired")
        self.token = token


class ArtifactError(ShortLinkError):
    pass


class StoreUnavailable(ShortLinkError):
    pass


class CacheUnavailable(ShortLinkError):
    pass
