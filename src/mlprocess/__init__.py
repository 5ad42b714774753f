# src/mlprocess/__init__.py
"""
mlprocess: execução distribuída, sem coordenador, de cenários de ML.

Um cenário declara tasks de computação, manipulação e avaliação que
produzem e consomem arquivos, datasets e features. O mlprocess deriva
as dependências desse uso declarado, expande padrões de arquivo,
paraleliza tasks marcadas e distribui o trabalho entre processos e
threads que cooperam através de um único arquivo de plano travado.

Arquitetura em alto nível:
    - core.config   → carregamento, merge e hashing de configuração
    - core.scenario → fontes de dados, nós de task e loader de cenário
    - core.planning → arena do plano, dependências, paralelização, expansão
    - core.store    → Plan Store persistente e resets
    - core.engine   → Workers e Process
    - tasks         → Tasks embutidas (splitter, merger, classifier, ...)

Limites explícitos:
    - Não é um motor distribuído em rede (sem RPC)
    - Não há ordenação entre tasks independentes além das dependências
"""

__version__ = "0.1.0"
