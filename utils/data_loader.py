"""
Carregamento de transações e orçamentos a partir de arquivos
CSV (via pandas) ou JSON
"""
import json
from pathlib import Path
from typing import Any, Dict, List, Union

import pandas as pd

from ml.models import CategoryBudget, Transaction, ensure_budgets, ensure_transactions
from utils.logger import get_logger

logger = get_logger(__name__)

SUPPORTED_EXTENSIONS = (".csv", ".json")


def _resolve(path: Union[str, Path]) -> Path:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Arquivo não encontrado: {path}")
    if path.suffix.lower() not in SUPPORTED_EXTENSIONS:
        raise ValueError(f"Formato não suportado: {path.suffix} (use CSV ou JSON)")
    return path


def _read_json(path: Path) -> Any:
    with open(path, encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"JSON inválido em {path}: {e}") from e


def _records_from_csv(path: Path) -> List[Dict[str, Any]]:
    # dtype=str preserva ids e datas como vieram; a conversão fica com Transaction.from_dict
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = df.columns.str.lower().str.strip()
    return df.to_dict(orient="records")


def load_transactions(path: Union[str, Path]) -> List[Transaction]:
    """
    Carrega transações de um arquivo CSV ou JSON.

    O JSON pode ser uma lista de registros ou um objeto com a chave
    'transactions'. Registros com campos inválidos são mantidos com
    valores seguros (ver Transaction.from_dict).

    Args:
        path: Caminho do arquivo

    Returns:
        Lista de Transaction

    Raises:
        FileNotFoundError: Se o arquivo não existir
        ValueError: Se a extensão ou o conteúdo não forem suportados
    """
    path = _resolve(path)

    if path.suffix.lower() == ".csv":
        records = _records_from_csv(path)
    else:
        data = _read_json(path)
        records = data.get("transactions", []) if isinstance(data, dict) else data
        if not isinstance(records, list):
            raise ValueError(f"Esperada uma lista de transações em {path}")

    transactions = ensure_transactions(records)
    logger.info(f"{len(transactions)} transações carregadas de {path.name}")
    return transactions


def load_budgets(path: Union[str, Path]) -> Dict[str, CategoryBudget]:
    """
    Carrega orçamentos de um arquivo JSON.

    Aceita o mapa {categoria: {amount, spent}} ou uma lista de registros
    com o campo 'category'.

    Raises:
        FileNotFoundError: Se o arquivo não existir
        ValueError: Se não for JSON ou se o conteúdo não for mapa nem lista
    """
    path = _resolve(path)
    if path.suffix.lower() != ".json":
        raise ValueError(f"Orçamentos devem estar em JSON: {path.name}")

    data = _read_json(path)
    if not isinstance(data, (dict, list)):
        raise ValueError(f"Formato de orçamentos inválido em {path}")

    budgets = ensure_budgets(data)
    logger.info(f"{len(budgets)} orçamentos carregados de {path.name}")
    return budgets
