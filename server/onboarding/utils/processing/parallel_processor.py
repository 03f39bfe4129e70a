"""Parallel fan-out helpers for independent storage calls within one request"""
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Dict, Iterable, List, Tuple
from onboarding.config.settings import ParallelConfig

class ParallelProcessor:
    """Runs independent callables on a thread pool and joins them"""

    @staticmethod
    def calculate_optimal_workers(task_count: int) -> int:
        return max(1, min(task_count, ParallelConfig.MAX_WORKERS))

    @staticmethod
    def run_all(tasks: Dict[str, Callable[[], Any]]) -> Dict[str, Any]:
        """Run named tasks concurrently; the first exception propagates"""
        if not tasks:
            return {}
        results = {}
        workers = ParallelProcessor.calculate_optimal_workers(len(tasks))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {executor.submit(fn): name for name, fn in tasks.items()}
            for future in as_completed(futures):
                results[futures[future]] = future.result()
        return results

    @staticmethod
    def map_isolated(fn: Callable[[Any], Any], items: Iterable[Any]) -> List[Tuple[Any, Any, Exception]]:
        """
        Apply fn to every item concurrently; one failure never affects the others.

        Returns (item, result, error) triples in input order.
        """
        items = list(items)
        if not items:
            return []
        outcomes: List[Tuple[Any, Any, Exception]] = [None] * len(items)
        workers = ParallelProcessor.calculate_optimal_workers(len(items))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {executor.submit(fn, item): idx for idx, item in enumerate(items)}
            for future in as_completed(futures):
                idx = futures[future]
                try:
                    outcomes[idx] = (items[idx], future.result(), None)
                except Exception as e:
                    outcomes[idx] = (items[idx], None, e)
        return outcomes
