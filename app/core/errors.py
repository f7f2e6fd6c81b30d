class TaskTrackError(Exception):
    """Base per tutti gli errori di dominio del servizio."""


class ValidationError(TaskTrackError):
    """Campo obbligatorio vuoto o mancante: non arriva mai allo store."""


class NotFoundError(TaskTrackError):
    def __init__(self, assignment_id: str):
        super().__init__(f"Assignment {assignment_id} not found")
        self.assignment_id = assignment_id


class StoreUnavailableError(TaskTrackError):
    """Errore di trasporto o di autenticazione verso lo store."""
