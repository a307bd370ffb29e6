import logging

import httpx

logger = logging.getLogger(__name__)

DEFAULT_WEBHOOK_TIMEOUT = 2.0


class LoggingNotifier:
    def predictions_changed(self, game_pk: int, at_bat_index: int) -> None:
        logger.info("Predictions changed for game %d at-bat %d", game_pk, at_bat_index)


class WebhookNotifier:
    """POSTs ``{"game_pk", "at_bat_index"}`` to a webhook. Delivery is best-effort."""

    def __init__(
        self,
        url: str,
        *,
        client: httpx.Client | None = None,
        timeout: float = DEFAULT_WEBHOOK_TIMEOUT,
    ) -> None:
        self._url = url
        self._client = client if client is not None else httpx.Client(timeout=timeout)

    def predictions_changed(self, game_pk: int, at_bat_index: int) -> None:
        try:
            response = self._client.post(self._url, json={"game_pk": game_pk, "at_bat_index": at_bat_index})
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Dropped notification for game %d at-bat %d: %s", game_pk, at_bat_index, exc)
            return
        logger.debug("Notified %s for game %d at-bat %d", self._url, game_pk, at_bat_index)

    def close(self) -> None:
        self._client.close()
