"""
Fork-join helpers.

Work is split into independent units that run on a thread pool. The parent
waits for every unit; the first failure cancels whatever has not started and
is re-raised, results of units still in flight are discarded.
"""
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Callable, Iterable, List, Optional, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def fork_join(tasks: Sequence[Callable[[], T]], max_workers: Optional[int] = None) -> List[T]:
    """Run zero-argument callables concurrently and return results in task order"""
    if not tasks:
        return []
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(task) for task in tasks]
        done, not_done = wait(futures, return_when=FIRST_EXCEPTION)
        for future in not_done:
            future.cancel()
        # earliest failed task in submission order
        for future in futures:
            if future in done and not future.cancelled() and future.exception() is not None:
                raise future.exception()
        return [future.result() for future in futures]


def parallel_map(
    fn: Callable[[T], R], items: Iterable[T], max_workers: Optional[int] = None
) -> List[R]:
    return fork_join([lambda item=item: fn(item) for item in items], max_workers=max_workers)
