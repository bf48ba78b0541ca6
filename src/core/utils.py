import asyncio
from functools import wraps
import logging
from typing import Any, Callable

from elasticsearch import ConnectionError as ESConnectionError
from elasticsearch import ConnectionTimeout
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

RETRYABLE_ERRORS: tuple[type[Exception], ...] = (
    ESConnectionError,
    ConnectionTimeout,
    RedisConnectionError,
    RedisTimeoutError,
)

_logger = logging.getLogger(__name__)


def async_backoff(
    start_sleep_time: float = 0.1,
    factor: int = 2,
    border_sleep_time: float = 2,
    max_tries: int = 3,
    exceptions: tuple[type[Exception], ...] = RETRYABLE_ERRORS,
) -> Callable:
    """Повторяет выполнение корутины при ошибках соединения.

    Время ожидания растет экспоненциально:
        t = start_sleep_time * factor ^ n, если t < border_sleep_time;
        t = border_sleep_time, иначе.

    Args:
        start_sleep_time: Начальное время ожидания.
        factor: Во сколько раз нужно увеличивать время ожидания.
        border_sleep_time: Максимальное время ожидания.
        max_tries: Максимальное число попыток.
        exceptions: Ошибки, при которых выполняется повтор.

    Returns:
        Декоратор для асинхронной функции.
    """

    def func_wrapper(func: Callable) -> Callable:
        @wraps(func)
        async def inner(*args, **kwargs) -> Any:
            sleep_time = start_sleep_time
            for attempt in range(1, max_tries + 1):
                try:
                    return await func(*args, **kwargs)
                except exceptions as error:
                    if attempt == max_tries:
                        raise
                    _logger.warning(
                        f'Ошибка соединения в {func.__qualname__}: {error}. '
                        f'Попытка {attempt} из {max_tries}, повтор через '
                        f'{sleep_time} с.',
                    )
                    await asyncio.sleep(sleep_time)
                    sleep_time = min(sleep_time * factor, border_sleep_time)
        return inner

    return func_wrapper
