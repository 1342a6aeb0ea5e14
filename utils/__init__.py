"""
Utilitários do motor de insights (logging e carregamento de arquivos)
"""
