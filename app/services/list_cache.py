# app/services/list_cache.py
import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from app.schemas.assignment import Assignment

logger = logging.getLogger("tasktrack.cache")

Listener = Callable[[str], Awaitable[None]]


class AssignmentListCache:
    """
    Cache della lista per utente, con un contatore di generazione.

    Ogni mutazione riuscita incrementa la generazione dell'utente: una lista
    letta con una generazione vecchia non viene più servita, la lettura
    successiva torna allo store. Chi si iscrive riceve l'owner a ogni
    invalidazione (è così che il reminder viene rilanciato).
    """

    def __init__(self):
        self._generations: Dict[str, int] = {}
        self._entries: Dict[str, Tuple[int, List[Assignment]]] = {}
        self._listeners: List[Listener] = []

    def generation(self, owner: str) -> int:
        return self._generations.get(owner, 0)

    def get(self, owner: str) -> Optional[List[Assignment]]:
        entry = self._entries.get(owner)
        if entry is None:
            return None
        gen, items = entry
        if gen != self.generation(owner):
            return None
        return list(items)

    def put(self, owner: str, generation: int, items: List[Assignment]) -> bool:
        # una mutazione arrivata durante la fetch rende la lista già vecchia
        if generation != self.generation(owner):
            return False
        self._entries[owner] = (generation, list(items))
        return True

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def invalidate(self, owner: str) -> int:
        gen = self.generation(owner) + 1
        self._generations[owner] = gen
        self._entries.pop(owner, None)
        logger.debug("Cache invalidata per %s (generazione %d)", owner, gen)

        if self._listeners:
            results = await asyncio.gather(
                *(listener(owner) for listener in list(self._listeners)),
                return_exceptions=True,
            )
            # un listener che fallisce non deve far fallire la mutazione
            for r in results:
                if isinstance(r, Exception):
                    logger.error("Listener di invalidazione fallito", exc_info=r)
        return gen
