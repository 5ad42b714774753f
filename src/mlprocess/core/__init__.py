# src/mlprocess/core/__init__.py
"""
Core do mlprocess.

Este pacote reúne as responsabilidades essenciais de planejamento,
persistência e execução de um cenário, independentes das Tasks
concretas.

Componentes principais:
    - config   → resolução de configuração (merge, validação estrutural, hashing)
    - scenario → modelo de cenário e loader
    - planning → resolução de dependências, paralelização, expansão, ordenação
    - store    → Plan Store com lock entre processos
    - engine   → laço dos Workers e Process
    - tasks    → contrato de Task e registro de algoritmos

Princípios fundamentais:
    - Nenhuma decisão silenciosa: todo comportamento é explícito e testado
    - Estado compartilhado apenas através do Plan Store
    - Contexto explícito (ProcessContext) em vez de singletons
"""
