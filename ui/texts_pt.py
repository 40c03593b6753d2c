APP_TITLE = "Lumina Production ERP"

# Page titles
PAGE_DASHBOARD = "Painel"
PAGE_COSTS = "Custos e Simulações"
PAGE_ORDERS = "Ordens de Produção"

# Buttons
BTN_SIMULATE = "Simular"
BTN_VALIDATE = "Validar Estoque"
BTN_CREATE_ORDER = "Criar Ordem"
BTN_DOWNLOAD_REPORT = "Baixar Ficha de Custos"
BTN_SAVE_SNAPSHOT = "Salvar Cálculo"

# Labels
LBL_PRODUCT = "Produto"
LBL_QUANTITY = "Quantidade"
LBL_PLANNED_DATE = "Data planejada"
LBL_NEW_PRICE = "Novo preço de venda"
LBL_TARGET_PROFIT = "Lucro desejado"
LBL_NOT_AVAILABLE = "N/A"

# Guidance
MSG_NEED_PRODUCT = "Cadastre um produto antes de continuar."
MSG_NO_BOM = "Produto sem ficha técnica: custo indisponível."
MSG_STOCK_OK = "Estoque suficiente para a ordem."
MSG_STOCK_MISSING = "Estoque insuficiente:"
MSG_ORDER_CREATED = "Ordem de produção criada"
MSG_SNAPSHOT_SAVED = "Cálculo de custos salvo"
MSG_REPORT_FAILED = "Não foi possível gerar a ficha de custos."
MSG_NO_CRITICAL = "Nenhum item com estoque crítico."
MSG_NO_BREAK_EVEN = "Margem de contribuição não positiva: o produto não atinge o ponto de equilíbrio."
