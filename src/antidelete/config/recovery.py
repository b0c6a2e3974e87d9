import os


class Recovery:
    def __init__(self, config: dict | None = None) -> None:
        recovery_cfg = (config or {}).get("recovery", {})
        # Upper bound for each media fetch / store write / delivery task (seconds).
        self.TASK_TIMEOUT: float = float(
            recovery_cfg.get("task_timeout", os.getenv("RECOVERY_TASK_TIMEOUT", "60"))
        )
