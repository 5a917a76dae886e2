import enum
import locale
import logging
import sys
from typing import Callable

from dotenv import load_dotenv

load_dotenv()

from chat_autopilot.config import CONFIG
from chat_autopilot.timing import now_utc_iso, process_start_utc_iso, uptime_seconds

SUCCESS_LEVEL = 25


class Severity(str, enum.Enum):
	INFO = 'info'
	SUCCESS = 'success'
	WARN = 'warn'
	ERROR = 'error'
	DEBUG = 'debug'


_SEVERITY_LEVELS = {
	Severity.INFO: logging.INFO,
	Severity.SUCCESS: SUCCESS_LEVEL,
	Severity.WARN: logging.WARNING,
	Severity.ERROR: logging.ERROR,
	Severity.DEBUG: logging.DEBUG,
}

LogSink = Callable[[str, Severity], None]


class LoggingSink:
	"""Log sink that forwards autopilot events to a standard library logger.

	`success` events go out on the custom SUCCESS level so they stay visible at INFO
	while remaining distinguishable from plain progress messages.
	"""

	def __init__(self, logger: logging.Logger | None = None):
		self.logger = logger or logging.getLogger('chat_autopilot')

	def __call__(self, message: str, severity: Severity = Severity.INFO) -> None:
		self.logger.log(_SEVERITY_LEVELS[Severity(severity)], message)


def addLoggingLevel(levelName, levelNum, methodName=None):
	"""
	Comprehensively adds a new logging level to the `logging` module and the
	currently configured logging class.

	`levelName` becomes an attribute of the `logging` module with the value
	`levelNum`. `methodName` becomes a convenience method for both `logging`
	itself and the class returned by `logging.getLoggerClass()` (usually just
	`logging.Logger`). If `methodName` is not specified, `levelName.lower()` is
	used.

	To avoid accidental clobberings of existing attributes, this method will
	raise an `AttributeError` if the level name is already an attribute of the
	`logging` module or if the method name is already present

	Example
	-------
	>>> addLoggingLevel('SUCCESS', 25)
	>>> logging.getLogger(__name__).success('recovered')
	>>> logging.SUCCESS
	25

	"""
	if not methodName:
		methodName = levelName.lower()

	if hasattr(logging, levelName):
		raise AttributeError(f'{levelName} already defined in logging module')
	if hasattr(logging, methodName):
		raise AttributeError(f'{methodName} already defined in logging module')
	if hasattr(logging.getLoggerClass(), methodName):
		raise AttributeError(f'{methodName} already defined in logger class')

	def logForLevel(self, message, *args, **kwargs):
		if self.isEnabledFor(levelNum):
			self._log(levelNum, message, args, **kwargs)

	def logToRoot(message, *args, **kwargs):
		logging.log(levelNum, message, *args, **kwargs)

	logging.addLevelName(levelNum, levelName)
	setattr(logging, levelName, levelNum)
	setattr(logging.getLoggerClass(), methodName, logForLevel)
	setattr(logging, methodName, logToRoot)


class SafeStreamHandler(logging.StreamHandler):
	"""A logging handler that gracefully handles consoles that can't encode emojis or CJK text.

	It retries writes with 'replace' on UnicodeEncodeError so a cp1252 console never kills the loop.
	"""

	def emit(self, record):  # type: ignore[override]
		try:
			msg = self.format(record)
			stream = self.stream
			try:
				stream.write(msg + self.terminator)
			except UnicodeEncodeError:
				enc = getattr(stream, 'encoding', None) or locale.getpreferredencoding(False) or 'utf-8'
				sanitized = msg.encode(enc, errors='replace').decode(enc, errors='replace')
				stream.write(sanitized + self.terminator)
			self.flush()
		except Exception:
			self.handleError(record)


def setup_logging(stream=None, log_level=None, force_setup=False):
	"""Setup logging configuration for chat_autopilot.

	Args:
		stream: Output stream for logs (default: sys.stdout).
		log_level: Override log level (default: uses CONFIG.AUTOPILOT_LOGGING_LEVEL)
		force_setup: Force reconfiguration even if handlers already exist
	"""
	try:
		addLoggingLevel('SUCCESS', SUCCESS_LEVEL)
	except AttributeError:
		pass  # Level already exists, which is fine

	log_type = log_level or CONFIG.AUTOPILOT_LOGGING_LEVEL

	if logging.getLogger().hasHandlers() and not force_setup:
		return logging.getLogger('chat_autopilot')

	root = logging.getLogger()
	root.handlers = []

	class AutopilotFormatter(logging.Formatter):
		def format(self, record):
			record.utc = now_utc_iso()
			record.uptime = f'{uptime_seconds():.3f}s'
			return super().format(record)

	console = SafeStreamHandler(stream or sys.stdout)

	if log_type == 'result':
		console.setLevel('SUCCESS')
		console.setFormatter(AutopilotFormatter('%(message)s'))
	else:
		console.setFormatter(AutopilotFormatter('%(levelname)-8s [%(name)s] %(utc)s (+%(uptime)s) %(message)s'))

	root.addHandler(console)

	if log_type == 'result':
		root.setLevel('SUCCESS')
	elif log_type == 'debug':
		root.setLevel(logging.DEBUG)
	else:
		root.setLevel(logging.INFO)

	autopilot_logger = logging.getLogger('chat_autopilot')
	autopilot_logger.propagate = False
	autopilot_logger.handlers = [console]
	autopilot_logger.setLevel(root.level)

	autopilot_logger.debug(f'Logging initialized at {now_utc_iso()} (process_start={process_start_utc_iso()})')

	# Silence or adjust third-party loggers
	third_party_loggers = [
		'playwright',
		'httpx',
		'httpcore',
		'asyncio',
	]
	for logger_name in third_party_loggers:
		third_party = logging.getLogger(logger_name)
		third_party.setLevel(logging.ERROR)
		third_party.propagate = False

	return autopilot_logger
