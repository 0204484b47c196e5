import threading
import time
from dataclasses import dataclass, field
from typing import Dict


@dataclass
class Totals:
    requests: int = 0
    bytes: int = 0
    errors: int = 0
    request_ms_sum: float = 0.0
    by_method: Dict[str, int] = field(default_factory=dict)


class Metrics:
    def __init__(self):
        self._totals = Totals()
        self._lock = threading.Lock()
        self._start = time.time()

    def record_request(self, method: str, ok: bool, bytes_read: int, request_ms: float) -> None:
        with self._lock:
            self._totals.requests += 1
            self._totals.bytes += max(0, bytes_read)
            if not ok:
                self._totals.errors += 1
            self._totals.request_ms_sum += request_ms
            method = method.upper()
            self._totals.by_method[method] = self._totals.by_method.get(method, 0) + 1

    def snapshot(self) -> tuple[Totals, float]:
        with self._lock:
            t = Totals(
                requests=self._totals.requests,
                bytes=self._totals.bytes,
                errors=self._totals.errors,
                request_ms_sum=self._totals.request_ms_sum,
                by_method=dict(self._totals.by_method),
            )
        elapsed = max(1e-6, time.time() - self._start)
        return t, elapsed

    def summary(self) -> str:
        totals, elapsed = self.snapshot()
        avg_ms = totals.request_ms_sum / max(1, totals.requests)
        methods = ", ".join(f"{m}={n}" for m, n in sorted(totals.by_method.items())) or "-"
        return (
            f"Perf: requests={totals.requests}, errors={totals.errors}, "
            f"KB={totals.bytes / 1024:.2f}, avg_request_ms={avg_ms:.1f}, "
            f"elapsed_s={elapsed:.2f}, methods=[{methods}]"
        )
