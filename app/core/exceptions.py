"""
Errores de dominio de la tienda.

Cada error lleva el código HTTP con el que se responde; el handler registrado
en `app.main` los convierte en `{"detail": mensaje}`.
"""


class StorefrontError(Exception):
    """Error base de la aplicación."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StorefrontError):
    """Campo requerido vacío, línea de pedido inválida o transición ilegal."""

    status_code = 400


class NotFoundError(StorefrontError):
    """El id de orden, producto o usuario no existe."""

    status_code = 404


class ForbiddenError(StorefrontError):
    """El usuario no tiene permisos para la operación."""

    status_code = 403


class ConfigurationError(StorefrontError):
    """Falta configuración del servidor (p. ej. el UPI del comercio)."""

    status_code = 500


class UpstreamNotificationError(StorefrontError):
    """Fallo al enviar un correo. Nunca debe llegar al cliente HTTP."""

    status_code = 502
