"""
arcade_backend/errors.py
Centralized error handling

CORE PRINCIPLES:
- All errors follow consistent structure
- Errors are user-safe (no stack traces)
- Errors are machine-readable
- Nothing is retried automatically inside one invocation

ERROR RESPONSE STRUCTURE:
{
    "success": false,
    "error": "ErrorType",
    "message": "Human-readable description",
    "code": "UNIQUE_ERROR_CODE",
    "details": {} (optional, tournament id / tx hash where known)
}

HTTP STATUS CODE DISCIPLINE:
- 200: Successful, valid request
- 400: Invalid input / malformed request
- 401: Missing or invalid scheduling credential
- 404: No current tournament on the ledger
- 409: Tournament is not in a state that allows the operation
- 429: Rate limit exceeded
- 502: Ledger read or write failed upstream
- 500: NEVER caused by user input (internal only)
"""

import logging
from typing import Optional, Dict, Any
from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ErrorCode:
    """Unique error codes for machine-readable error handling"""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"

    AUTH_REQUIRED = "AUTH_REQUIRED"
    AUTH_INVALID = "AUTH_INVALID"

    NOT_FOUND = "NOT_FOUND"
    NO_TOURNAMENT = "NO_TOURNAMENT"

    INVALID_STATE = "INVALID_STATE"

    UPSTREAM_READ_FAILED = "UPSTREAM_READ_FAILED"
    TRANSACTION_FAILED = "TRANSACTION_FAILED"
    SUCCESSOR_CREATION_FAILED = "SUCCESSOR_CREATION_FAILED"

    RATE_LIMITED = "RATE_LIMITED"

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorResponse(BaseModel):
    """Standard error response model"""
    success: bool = False
    error: str
    message: str
    code: str
    details: Optional[Dict[str, Any]] = None


class APIError(Exception):
    """Base API exception with consistent structure"""

    def __init__(
        self,
        status_code: int,
        error: str,
        message: str,
        code: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.status_code = status_code
        self.error = error
        self.message = message
        self.code = code
        self.details = details
        super().__init__(message)

    def to_response(self) -> JSONResponse:
        """Convert to FastAPI JSONResponse"""
        return JSONResponse(status_code=self.status_code, content=self.to_dict())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        result = {
            "success": False,
            "error": self.error,
            "message": self.message,
            "code": self.code
        }
        if self.details:
            result["details"] = self.details
        return result


class InvalidInputError(APIError):
    """400 Bad Request - malformed or missing fields. Never retried."""
    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict] = None):
        details = dict(details or {})
        if field:
            details["field"] = field
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error="Invalid Input",
            message=message,
            code=ErrorCode.INVALID_INPUT,
            details=details or None
        )


class AuthorizationError(APIError):
    """401 Unauthorized - missing or invalid scheduling credential"""
    def __init__(self, message: str = "Unauthorized", code: str = ErrorCode.AUTH_INVALID):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error="Unauthorized",
            message=message,
            code=code
        )


class NoTournamentError(APIError):
    """404 - the ledger reports no current tournament (operator must bootstrap)"""
    def __init__(self, message: str = "No tournament found"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error="Not Found",
            message=message,
            code=ErrorCode.NO_TOURNAMENT
        )


class InvalidStateError(APIError):
    """409 Conflict - tournament state does not allow the operation"""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error="Invalid State",
            message=message,
            code=ErrorCode.INVALID_STATE,
            details=details
        )


class UpstreamReadError(APIError):
    """502 - a ledger read failed. Safe to retry on the next scheduled trigger."""
    def __init__(self, message: str, operation: Optional[str] = None, tournament_id: Optional[int] = None):
        details = {}
        if operation:
            details["operation"] = operation
        if tournament_id is not None:
            details["tournament_id"] = str(tournament_id)
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            error="Upstream Read Failed",
            message=message,
            code=ErrorCode.UPSTREAM_READ_FAILED,
            details=details or None
        )


class TransactionFailedError(APIError):
    """502 - a submitted write did not confirm. Never retried within the same run."""
    def __init__(
        self,
        message: str,
        action: str,
        tx_hash: Optional[str] = None,
        tournament_id: Optional[int] = None,
        reverted: bool = False
    ):
        self.action = action
        self.tx_hash = tx_hash
        self.tournament_id = tournament_id
        # True only when a receipt was obtained and its status is failure
        self.reverted = reverted
        details = {"action": action}
        if tx_hash:
            details["tx_hash"] = tx_hash
        if reverted:
            details["reverted"] = True
        if tournament_id is not None:
            details["tournament_id"] = str(tournament_id)
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            error="Transaction Failed",
            message=message,
            code=ErrorCode.TRANSACTION_FAILED,
            details=details
        )


class SuccessorCreationFailedError(APIError):
    """
    502 - finalize confirmed but the successor tournament was not created.

    The ledger is left with a finalized tournament and no active successor.
    Recover with the create-successor operation.
    """
    def __init__(self, previous_tournament_id: int, finalize_tx: Optional[str], cause: Exception):
        self.previous_tournament_id = previous_tournament_id
        self.finalize_tx = finalize_tx
        self.cause = cause
        details = {
            "previous_tournament_id": str(previous_tournament_id),
            "finalize_tx": finalize_tx,
            "cause": str(cause),
        }
        if isinstance(cause, TransactionFailedError) and cause.tx_hash:
            details["create_tx"] = cause.tx_hash
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            error="Successor Creation Failed",
            message=f"Tournament {previous_tournament_id} finalized but successor creation failed",
            code=ErrorCode.SUCCESSOR_CREATION_FAILED,
            details=details
        )


class ConfigurationError(APIError):
    """500 - required server configuration is missing or malformed"""
    def __init__(self, message: str):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error="Configuration Error",
            message=message,
            code=ErrorCode.CONFIGURATION_ERROR
        )


def get_error_summary() -> Dict[str, Any]:
    """Return summary of error handling system for documentation"""
    return {
        "service": "api-error-handler",
        "response_structure": {
            "success": "boolean (always false for errors)",
            "error": "string (error type)",
            "message": "string (human-readable)",
            "code": "string (machine-readable)",
            "details": "object (optional)"
        },
        "status_codes": {
            "200": "Successful, valid request",
            "400": "Invalid input / malformed request",
            "401": "Missing or invalid scheduling credential",
            "404": "No current tournament",
            "409": "Tournament state does not allow the operation",
            "429": "Rate limit exceeded",
            "502": "Ledger read or write failed",
            "500": "Internal error (NEVER caused by user input)"
        },
        "error_codes": [
            attr for attr in dir(ErrorCode)
            if not attr.startswith('_')
        ]
    }
