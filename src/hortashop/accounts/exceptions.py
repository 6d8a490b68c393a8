"""Account exceptions."""

from __future__ import annotations

from hortashop.core.exceptions import AuthError, ServerError, ValidationError


class InvalidCredentials(AuthError):
    default_message = "Email ou senha inválidos."


class LoginError(ServerError):
    default_message = "Erro ao fazer login."


class RegistrationError(ServerError):
    default_message = "Erro ao realizar cadastro."


class InvalidRegistrationData(ValidationError):
    default_message = "Dados de cadastro inválidos. Verifique os campos informados."
