"""Demo entrypoint wiring together the logging components.

This module intentionally contains a small, end-to-end "smoke test" that:

- Loads configuration from environment (`TINYLOG_*`, `.env`).
- Applies it to the default dispatcher (console sink, optional file sink).
- Emits one line per severity so thresholds and colors can be eyeballed.

Run with `python -m tinylog`.
"""

from __future__ import annotations

import tinylog
from tinylog.config import LogConfig, load_config


def run_demo(config: LogConfig | None = None) -> None:
    """Log one message per level through the configured default dispatcher."""
    cfg = config if config is not None else load_config()
    fp = tinylog.configure(cfg)
    try:
        tinylog.init()
        tinylog.trace("tracing %s", "enabled")
        tinylog.debug("sink capacity is %d", tinylog.get_dispatcher().capacity)
        tinylog.info("console level is %s", tinylog.level_name(cfg.level))
        tinylog.warn("quiet=%s color=%s", cfg.quiet, cfg.use_color)
        tinylog.error("disk %s", "full")
        tinylog.fatal("fatal is only a label; still running")
    finally:
        if fp is not None:
            # Drop the file sink before its handle goes away.
            tinylog.get_dispatcher().reset()
            fp.close()


def main() -> None:
    run_demo()


if __name__ == "__main__":
    main()
