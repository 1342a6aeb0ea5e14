"""
Sistema de logging estruturado para o motor de insights
"""
import logging
import sys
from pathlib import Path
from typing import Any, Optional

from config import LOG_LEVEL, LOG_FILE, LOGS_DIR


class ColoredFormatter(logging.Formatter):
    """Formatter com cores para output no console"""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        # Copia para não vazar a cor para o handler de arquivo
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname, self.RESET)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def get_logger(name: str, log_file: Optional[Path] = None) -> logging.Logger:
    """
    Cria e retorna um logger configurado

    Args:
        name: Nome do logger (geralmente __name__)
        log_file: Arquivo de log opcional (usa padrão se não especificado)

    Returns:
        Logger configurado
    """
    logger = logging.getLogger(name)

    # Evitar duplicação de handlers
    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, LOG_LEVEL.upper(), logging.INFO))

    LOGS_DIR.mkdir(exist_ok=True)

    # Handler para console (com cores)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG)
    console_handler.setFormatter(ColoredFormatter(
        '%(asctime)s | %(levelname)s | %(name)s | %(message)s',
        datefmt='%H:%M:%S'
    ))
    logger.addHandler(console_handler)

    # Handler para arquivo
    file_handler = logging.FileHandler(log_file or LOG_FILE, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s | %(levelname)s | %(name)s | %(funcName)s:%(lineno)d | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    logger.addHandler(file_handler)

    return logger


def log_analysis(logger: logging.Logger, stage: str, **fields: Any) -> None:
    """
    Loga o resultado de uma etapa de análise de forma estruturada

    Args:
        logger: Logger a ser usado
        stage: Etapa do pipeline (monthly, anomalies, behavior, budgets...)
        **fields: Pares chave=valor a registrar
    """
    details = " | ".join(f"{key}={value}" for key, value in fields.items())
    logger.info(f"ANALYSIS | stage={stage} | {details}" if details else f"ANALYSIS | stage={stage}")


def log_alert(logger: logging.Logger, alert_type: str, message: str, score: float = 0) -> None:
    """
    Loga alertas gerados pela análise

    Args:
        logger: Logger a ser usado
        alert_type: Tipo do alerta (anomaly, impulse, budget)
        message: Mensagem do alerta
        score: Score associado ao alerta
    """
    logger.warning(
        f"ALERT | type={alert_type} | score={score:.2f} | message={message}"
    )
