# mei_facil/config.py
import os
import logging
from dotenv import load_dotenv

load_dotenv()

# Configurações do Supabase
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")

# Linhas únicas (implantação single-tenant). Num cenário multi-usuário viram chave estrangeira do usuário.
MEI_SETTINGS_ID = os.getenv("MEI_SETTINGS_ID", "00000000-0000-0000-0000-000000000000")
COMPANY_PROFILE_ID = os.getenv("COMPANY_PROFILE_ID", "11111111-1111-1111-1111-111111111111")

# Plano do usuário ("free" ou "paid") e flag de administrador
USER_PLAN = os.getenv("MEI_USER_PLAN", "free")
IS_ADMIN = os.getenv("MEI_IS_ADMIN", "false").strip().lower() in ("1", "true", "sim", "yes")

# Regras do MEI
ANNUAL_REVENUE_LIMIT = 81000
MAX_FREE_TRANSACTIONS = 50
DAS_DUE_DAY = 20

DAS_PAYMENT_URL = "https://www8.receita.fazenda.gov.br/SimplesNacional/Aplicacoes/ATSPO/pgmei.app/Identificacao"
DASN_SUBMISSION_URL = "https://www8.receita.fazenda.gov.br/SimplesNacional/Aplicacoes/ATSPO/dasnsimei.app/Identificacao"

# Logging (o ponto de entrada chama logging.basicConfig(**LOGGING_CONFIG))
LOGGING_CONFIG = {
    "level": getattr(logging, os.getenv("MEI_LOG_LEVEL", "INFO").upper(), logging.INFO),
    "format": "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
}
