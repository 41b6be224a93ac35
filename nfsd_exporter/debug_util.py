import os, logging, sys

logger = logging.getLogger("nfsd_exporter")

# Trace channels: env flag -> log tag. DEBUG_VERBOSE covers the whole service,
# the others are noisier per-line traces that stay off unless asked for.
VERBOSE = 'DEBUG_VERBOSE'
PARSER = 'DEBUG_NFSD_PARSER'
_TAGS = {VERBOSE: 'debug', PARSER: 'parser'}


def _ensure_logger():
    """Attach a basic StreamHandler if none present.

    Done lazily so importing the package never overrides the host
    application's logging configuration.
    """
    if logger.handlers:
        return
    logger.setLevel(logging.INFO)
    h = logging.StreamHandler(stream=sys.stderr)
    fmt = logging.Formatter('%(asctime)s %(levelname)s %(message)s')
    h.setFormatter(fmt)
    logger.addHandler(h)


def trace_enabled(channel: str = VERBOSE) -> bool:
    return os.environ.get(channel) == '1'


def dbg(msg: str, channel: str = VERBOSE):
    """Emit an info line tagged with the channel when its env flag is 1."""
    if trace_enabled(channel):
        _ensure_logger()
        logger.info('[%s] %s', _TAGS.get(channel, channel.lower()), msg)
