from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
	numeric = getattr(logging, str(level).upper(), None)
	if not isinstance(numeric, int):
		numeric = logging.INFO
	logging.basicConfig(level=numeric, format=LOG_FORMAT)
	logging.getLogger("codebrief").setLevel(numeric)
	# strands and botocore are chatty at INFO
	for noisy in ("strands", "botocore", "urllib3"):
		logging.getLogger(noisy).setLevel(max(numeric, logging.WARNING))
