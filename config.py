"""
Configurações globais do motor de insights financeiros
"""
import os
from pathlib import Path
from dotenv import load_dotenv

# Carregar variáveis de ambiente
load_dotenv()

# === Diretórios ===
BASE_DIR = Path(__file__).parent
LOGS_DIR = BASE_DIR / "logs"

# Criar diretório de logs se não existir
LOGS_DIR.mkdir(exist_ok=True)

# === Detecção de Anomalias ===
ANOMALY_SENSITIVITY = os.getenv("ANOMALY_SENSITIVITY", "medium")  # low, medium, high

# === Previsões ===
SMOOTHING_ALPHA = float(os.getenv("SMOOTHING_ALPHA", "0.3"))
FORECAST_PERIODS = int(os.getenv("FORECAST_PERIODS", "3"))

# === Orçamentos ===
TREND_MONTHS = int(os.getenv("TREND_MONTHS", "3"))  # Meses usados na tendência por categoria

# === Limiares de Impulso ===
IMPULSE_MIN_AMOUNT = float(os.getenv("IMPULSE_MIN_AMOUNT", "20.0"))

# === Recomendações ===
# Recomendações fixas de demonstração, iguais para todos os usuários
INCLUDE_DEMO_RECOMMENDATIONS = os.getenv("INCLUDE_DEMO_RECOMMENDATIONS", "true").lower() in ("1", "true", "yes")

# === Transações ===
DEFAULT_CATEGORY = "Uncategorized"

# === Logging ===
LOG_LEVEL = os.getenv("INSIGHTS_LOG_LEVEL", os.getenv("LOG_LEVEL", "INFO"))
LOG_FILE = LOGS_DIR / os.getenv("INSIGHTS_LOG_FILE", "insights.log")
