"""
Exceptions personnalisées pour OpenCode Bridge.
"""


class BridgeError(Exception):
    """Exception de base pour toutes les erreurs du bridge."""
    
    def __init__(self, message: str, code: str = None, details: dict = None):
        super().__init__(message)
        self.message = message
        self.code = code or "unknown_error"
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"[{self.code}] {self.message} - Détails: {self.details}"
        return f"[{self.code}] {self.message}"


class ConfigurationError(BridgeError):
    """Erreur de configuration (fichier manquant, valeur invalide)."""
    
    def __init__(self, message: str, config_key: str = None):
        super().__init__(
            message=message,
            code="config_error",
            details={"key": config_key} if config_key else {}
        )


class BackendUnavailableError(BridgeError):
    """Backend OpenCode injoignable ou réponse non-2xx (session, providers)."""
    
    def __init__(self, message: str, endpoint: str = None, status_code: int = None):
        details = {}
        if endpoint:
            details["endpoint"] = endpoint
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(
            message=message,
            code="backend_unavailable",
            details=details
        )
        self.status_code = status_code


class RelayError(BridgeError):
    """Échec de l'envoi d'un message vers la session backend."""
    
    def __init__(self, message: str, session_id: str = None, status_code: int = None):
        details = {}
        if session_id:
            details["session_id"] = session_id
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(
            message=message,
            code="relay_failed",
            details=details
        )
        self.status_code = status_code


class UnknownModelError(BridgeError):
    """Modèle demandé absent du registre."""
    
    def __init__(self, model_id: str):
        super().__init__(
            message="Model not found",
            code="unknown_model",
            details={"model_id": model_id}
        )
        self.model_id = model_id
