"""
Registration client - Two-phase invitation gate.

UI-agnostic state container plus the HTTP adapter it talks to.
"""

from .exceptions import ClientError, GateBusy, ServiceUnavailable
from .forms import PASSWORDS_NOT_MATCHED, Phase, RegisterForm, TokenForm, validate
from .gate import GateState, RegistrationApi, RegistrationGate, token_from_url
from .http import HttpRegistrationApi

__all__ = [
    "PASSWORDS_NOT_MATCHED",
    "ClientError",
    "GateBusy",
    "GateState",
    "HttpRegistrationApi",
    "Phase",
    "RegisterForm",
    "RegistrationApi",
    "RegistrationGate",
    "ServiceUnavailable",
    "TokenForm",
    "token_from_url",
    "validate",
]
