"""
Structured logging for the Aori arbitrage bot.
Supports JSON logging for log aggregation.
"""

import logging
import sys
from typing import Optional
from pythonjsonlogger import jsonlogger


ROOT_LOGGER = "aori_arb"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with additional fields."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['timestamp'] = self.formatTime(record, self.datefmt)


def setup_logging(
    level: str = "INFO",
    json_format: bool = True,
    logger_name: Optional[str] = None
) -> logging.Logger:
    """
    Set up logging configuration.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: Whether to emit one JSON object per line
        logger_name: Optional specific logger name

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name or ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers
    logger.handlers = []

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(getattr(logging, level.upper()))

    if json_format:
        formatter = CustomJsonFormatter(
            '%(timestamp)s %(level)s %(name)s %(message)s'
        )
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a child logger with the given name."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


class TradeLogger:
    """Specialized logger for arbitrage events."""

    def __init__(self):
        self.logger = get_logger("trades")

    def opportunity_detected(
        self,
        maker_hash: str,
        taker_hash: str,
        input_token: str,
        output_token: str,
        surplus: int
    ):
        """Log when two opposing orders form an arbitrage."""
        self.logger.info(
            "Arbitrage opportunity detected",
            extra={
                "event": "opportunity_detected",
                "maker_hash": maker_hash,
                "taker_hash": taker_hash,
                "input_token": input_token,
                "output_token": output_token,
                # Amounts can exceed 64 bits; keep them exact in JSON output
                "surplus": str(surplus)
            }
        )

    def payload_sent(self, request_id: int, method: str):
        """Log when a request payload is written to the exchange."""
        self.logger.info(
            "Payload sent",
            extra={
                "event": "payload_sent",
                "request_id": request_id,
                "method": method
            }
        )

    def payload_failed(
        self,
        request_id: Optional[int],
        method: Optional[str],
        error: str
    ):
        """Log when a request payload could not be sent."""
        self.logger.error(
            "Payload failed",
            extra={
                "event": "payload_failed",
                "request_id": request_id,
                "method": method,
                "error": error
            }
        )
