"""
Система метрик для мониторинга работы бота
"""

import functools
import time
from collections import defaultdict, deque
from typing import Dict, Any, Optional
from datetime import datetime, timedelta
from utils.logger import setup_logger

logger = setup_logger(name="metrics", level="INFO")

class MetricsCollector:
    """Сбор метрик: операции обработчиков и исходы диалогов"""

    def __init__(self, max_history_size: int = 1000):
        self.max_history_size = max_history_size

        # Счетчики операций
        self.counters = defaultdict(int)

        # История операций
        self.operation_history = deque(maxlen=max_history_size)

        # Время выполнения операций
        self.timing_data = defaultdict(list)

        # Ошибки
        self.error_counts = defaultdict(int)

        # Ответы диалога по ключу ("added_expense", "storage_error", ...)
        self.reply_counts = defaultdict(int)

    def record_operation(self, operation: str, user_id: int, duration: Optional[float] = None, success: bool = True):
        """Запись операции"""
        self.counters[operation] += 1
        self.operation_history.append({
            'operation': operation,
            'user_id': user_id,
            'timestamp': datetime.now(),
            'duration': duration,
            'success': success
        })

        if duration is not None:
            self.timing_data[operation].append(duration)
            # Ограничиваем размер истории времени
            if len(self.timing_data[operation]) > 100:
                self.timing_data[operation] = self.timing_data[operation][-100:]

        if success:
            logger.debug(f"Operation {operation} completed by user {user_id}" +
                         (f" in {duration:.2f}s" if duration else ""))
        else:
            self.error_counts[operation] += 1
            logger.warning(f"Operation {operation} failed for user {user_id}")

    def record_reply(self, key: str):
        """Учёт исхода хода диалога"""
        self.reply_counts[key] += 1

    def get_stats(self, hours: int = 24) -> Dict[str, Any]:
        """Получение статистики за указанное количество часов"""
        cutoff_time = datetime.now() - timedelta(hours=hours)
        recent_operations = [
            record for record in self.operation_history
            if record['timestamp'] >= cutoff_time
        ]

        operation_counts = defaultdict(int)
        failed_operations = defaultdict(int)
        for record in recent_operations:
            operation_counts[record['operation']] += 1
            if not record['success']:
                failed_operations[record['operation']] += 1

        avg_timings = {
            operation: sum(times) / len(times)
            for operation, times in self.timing_data.items()
            if times
        }

        return {
            'period_hours': hours,
            'total_operations': len(recent_operations),
            'active_users': len(set(record['user_id'] for record in recent_operations)),
            'operation_counts': dict(operation_counts),
            'failed_operations': dict(failed_operations),
            'average_timings': avg_timings,
            'replies': dict(self.reply_counts),
            'error_rates': {
                op: failed_operations[op] / operation_counts[op] * 100
                for op in operation_counts
                if operation_counts[op] > 0
            }
        }

    def log_daily_stats(self):
        """Логирование ежедневной статистики"""
        stats = self.get_stats(24)
        logger.info(f"Daily stats: {stats}")

# Глобальный экземпляр метрик
metrics = MetricsCollector()

def track_operation(operation: str):
    """Декоратор для отслеживания операций обработчиков aiogram"""
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            start_time = time.time()
            user_id = None

            # Пытаемся извлечь user_id из аргументов
            for arg in args:
                if hasattr(arg, 'from_user') and hasattr(arg.from_user, 'id'):
                    user_id = arg.from_user.id
                    break

            try:
                result = await func(*args, **kwargs)
                metrics.record_operation(operation, user_id or 0, time.time() - start_time, True)
                return result
            except Exception:
                metrics.record_operation(operation, user_id or 0, time.time() - start_time, False)
                raise

        return wrapper
    return decorator
