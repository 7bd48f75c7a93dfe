import os
from dotenv import load_dotenv

# Загрузка .env
load_dotenv()

# База данных
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///mlm.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"

# Логирование
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# MLM defaults (используются, пока в system_config нет значения)
DEFAULT_MLM_STRUCTURE = os.getenv("DEFAULT_MLM_STRUCTURE", "binary")
DEFAULT_PV_CALCULATION = os.getenv("DEFAULT_PV_CALCULATION", "percentage")
DEFAULT_PERFORMANCE_BONUS_ENABLED = os.getenv("DEFAULT_PERFORMANCE_BONUS_ENABLED", "false")
DEFAULT_MONTHLY_CUTOFF_DAY = int(os.getenv("DEFAULT_MONTHLY_CUTOFF_DAY", "25"))
DEFAULT_BINARY_MAX_DEPTH = int(os.getenv("DEFAULT_BINARY_MAX_DEPTH", "6"))
DEFAULT_UNILEVEL_MAX_DEPTH = int(os.getenv("DEFAULT_UNILEVEL_MAX_DEPTH", "6"))

# Доля цены, идущая в PV при pv_calculation = percentage
PV_PERCENTAGE_OF_PRICE = os.getenv("PV_PERCENTAGE_OF_PRICE", "50")

# Базовая сумма для процентной реферальной награды
REFERRAL_REWARD_BASE_VALUE = os.getenv("REFERRAL_REWARD_BASE_VALUE", "100")

# Payout runner
PAYOUT_CHECK_INTERVAL = int(os.getenv("PAYOUT_CHECK_INTERVAL", "900"))
PAYOUT_BATCH_SIZE = int(os.getenv("PAYOUT_BATCH_SIZE", "500"))
