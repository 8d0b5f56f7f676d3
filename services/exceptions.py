"""Error taxonomy shared by the job client, adapters and the HTTP layer"""
from typing import Optional


class GatewayError(Exception):
    """Base exception for gateway errors"""
    kind = "gateway_error"
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class InvalidRequest(GatewayError):
    """Client input failed parsing or validation"""
    kind = "invalid_request"
    status_code = 400


class Unauthorized(GatewayError):
    """A required credential is missing"""
    kind = "unauthorized"
    status_code = 401


class UpstreamError(GatewayError):
    """Backend was reached but reported a failure"""
    kind = "upstream_error"
    status_code = 500

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        self.upstream_status = upstream_status
        super().__init__(message)


class ProtocolError(GatewayError):
    """Backend response broke the job-id / event-stream contract"""
    kind = "protocol_error"
    status_code = 500


class BackendTimeout(GatewayError, TimeoutError):
    """Backend did not finish within the configured deadline"""
    kind = "timeout"
    status_code = 504
