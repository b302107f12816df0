"""Domain-specific errors raised by the store, service and transport layers."""

from miniblog.core.errors import (
    ErrorX,
    InternalError,
    InvalidArgumentError,
    NotFoundError,
    UnauthenticatedError,
)


class UserAlreadyExistsError(ErrorX):
    code = 400
    reason = "AlreadyExist.UserAlreadyExists"
    message = "User already exists."


class UserNotFoundError(NotFoundError):
    reason = "NotFound.UserNotFound"
    message = "User not found."


class PostNotFoundError(NotFoundError):
    reason = "NotFound.PostNotFound"
    message = "Post not found."


class UsernameInvalidError(InvalidArgumentError):
    reason = "InvalidArgument.UsernameInvalid"
    message = "Invalid username: Username must consist of letters, digits, and underscores only, and its length must be between 3 and 20 characters."


class PasswordInvalidError(UnauthenticatedError):
    reason = "Unauthenticated.PasswordInvalid"
    message = "Password is incorrect."


class TokenInvalidError(UnauthenticatedError):
    reason = "Unauthenticated.TokenInvalid"
    message = "Token was invalid."


class SignTokenError(UnauthenticatedError):
    reason = "Unauthenticated.SignToken"
    message = "Error occurred while attempting to sign the JSON web token."


class DBReadError(InternalError):
    reason = "InternalError.DBRead"
    message = "Database read failure."


class DBWriteError(InternalError):
    reason = "InternalError.DBWrite"
    message = "Database write failure."
