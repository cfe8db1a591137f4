import logging
import sys


class _ThirdPartyNoiseFilter(logging.Filter):
    """Garde nos logs, ne laisse passer les libs tierces qu'à partir de WARNING."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("taskflow"):
            return True
        return record.levelno >= logging.WARNING


def setup_logging(level: str = "INFO") -> None:
    """Configure le logger racine (stderr). A appeler une seule fois au démarrage."""
    root = logging.getLogger()
    root.setLevel(level.upper())

    # évite les handlers en double si l'app est rechargée
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setFormatter(fmt)
    ch.addFilter(_ThirdPartyNoiseFilter())
    root.addHandler(ch)

    logging.captureWarnings(True)
