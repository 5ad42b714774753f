# src/mlprocess/cli.py
"""
Interface de linha de comando do mlprocess.

Uso:
    mlprocess <cenário> [-t N] [-i N] [-v 0-4] [-d DIR] [-r LISTA] [-c N] [-p] [--config ARQ]

Códigos de saída:
    - 0: execução concluída (mesmo com tasks FAILED; ver `<cenário>.status`)
    - 1: erro de parâmetro, de configuração, de cenário ou de acesso ao plano

`--parse_only` valida e planeja o cenário em memória, imprime um resumo
e não toca no arquivo `.todo`.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional, Sequence

from mlprocess.core.config import ConfigError, resolve_config
from mlprocess.core.context import ProcessContext, configure_logging
from mlprocess.core.engine.process import Process
from mlprocess.core.exceptions import ParamError, PlanStoreError, ScenarioError
from mlprocess.core.planning.plan import Plan
from mlprocess.core.planning.planner import build_plan
from mlprocess.core.store.reset import parse_reset_instructions
from mlprocess.tasks import default_registry


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        raise ParamError(message, details={"usage": self.format_usage().strip()})


def _bounded_int(name: str, minimum: int, maximum: Optional[int] = None):
    def convert(raw: str) -> int:
        try:
            value = int(raw)
        except ValueError:
            raise argparse.ArgumentTypeError(f"{name} deve ser inteiro, recebido {raw!r}")
        if value < minimum or (maximum is not None and value > maximum):
            bound = f"entre {minimum} e {maximum}" if maximum is not None else f">= {minimum}"
            raise argparse.ArgumentTypeError(f"{name} deve ser {bound}, recebido {value}")
        return value

    return convert


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="mlprocess",
        description="Executa um cenário de tasks de ML em um ou mais processos cooperantes.",
    )
    parser.add_argument("scenario", help="arquivo do cenário (YAML ou JSON)")
    parser.add_argument("-t", "--threads", type=_bounded_int("threads", 1), help="threads de worker neste processo")
    parser.add_argument(
        "-i", "--instances", type=_bounded_int("instances", 1),
        help="número de processos simultâneos (orçamento de paralelização)",
    )
    parser.add_argument(
        "-v", "--verbosity", type=_bounded_int("verbosity", 0, 4),
        help="0 = nada, 1 = importante, 2 = warnings, 3 = info, 4 = debug",
    )
    parser.add_argument("-d", "--workdir", help="diretório base dos arquivos do cenário")
    parser.add_argument(
        "-r", "--reset", default="",
        help="resets separados por vírgula: prefixos de id, '!' (reconstruir) ou '#' (tasks alteradas)",
    )
    parser.add_argument(
        "-c", "--retrieve_count", type=_bounded_int("retrieve_count", 1),
        help="tasks reivindicadas por acesso ao plano",
    )
    parser.add_argument("-p", "--parse_only", action="store_true", help="apenas valida e planeja o cenário")
    parser.add_argument("--config", help="arquivo de configuração (YAML ou JSON)")
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Raises:
        ParamError: argumentos ausentes, extras ou fora do domínio; arquivos inexistentes.
    """
    args = build_parser().parse_args(argv)

    if not Path(args.scenario).is_file():
        raise ParamError(f"cenário não encontrado: {args.scenario}", details={"scenario": args.scenario})
    if args.workdir is not None and not Path(args.workdir).is_dir():
        raise ParamError(f"diretório de trabalho não encontrado: {args.workdir}", details={"workdir": args.workdir})
    if args.config is not None and not Path(args.config).is_file():
        raise ParamError(f"arquivo de configuração não encontrado: {args.config}", details={"config": args.config})
    return args


def overrides_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    scheduler: Dict[str, Any] = {}
    for key in ("threads", "instances", "retrieve_count"):
        value = getattr(args, key)
        if value is not None:
            scheduler[key] = value

    overrides: Dict[str, Any] = {}
    if scheduler:
        overrides["scheduler"] = scheduler
    if args.verbosity is not None:
        overrides["logging"] = {"verbosity": args.verbosity}
    return overrides


def _check_config(config: Dict[str, Any]) -> None:
    scheduler = config["scheduler"]
    for key in ("threads", "instances", "retrieve_count"):
        if not isinstance(scheduler.get(key), int) or scheduler[key] < 1:
            raise ParamError(f"scheduler.{key} deve ser inteiro >= 1", details={key: scheduler.get(key)})
    verbosity = config["logging"].get("verbosity")
    if not isinstance(verbosity, int) or not 0 <= verbosity <= 4:
        raise ParamError("logging.verbosity deve estar entre 0 e 4", details={"verbosity": verbosity})


def summarize(plan: Plan) -> List[str]:
    lines = [f"{plan.scenario}: {len(plan)} task(s)"]
    for node in plan.nodes:
        deps = ", ".join(plan.nodes[j].id for j in node.depends_on) or "-"
        lines.append(f"  {node.id} [{node.kind.value}] {node.algorithm.name} <- {deps}")
    return lines


def _fail(exc: BaseException) -> int:
    print(f"mlprocess: error: {exc}", file=sys.stderr)
    hint = getattr(exc, "hint", None)
    if hint:
        print(f"mlprocess: hint: {hint}", file=sys.stderr)
    return 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    try:
        args = parse_args(argv)
        config = resolve_config(config_path=args.config, overrides=overrides_from_args(args))
        _check_config(config)
    except (ParamError, ConfigError) as e:
        return _fail(e)

    configure_logging(config["logging"]["verbosity"])
    ctx = ProcessContext.create(
        scenario_path=args.scenario,
        workdir=args.workdir,
        config=config,
        registry=default_registry(),
    )

    try:
        if args.parse_only:
            plan = build_plan(ctx.scenario_path, workers=ctx.workers)
            print("\n".join(summarize(plan)))
            return 0
        Process(ctx).run(parse_reset_instructions(args.reset))
    except (ScenarioError, PlanStoreError) as e:
        return _fail(e)
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
