"""명령행 진입점

    python -m food_catalog --mode comprehensive --output-dir ./catalog

종료 코드:
    0: 완료 (예산 소진으로 일찍 끝난 실행 포함)
    1: 인증 실패(ABORTED) 또는 저장 실패
    2: 자격 증명 누락 등 설정 오류
"""

from __future__ import annotations

import argparse
import asyncio
from typing import Optional

from food_catalog.core.config import Settings, settings as default_settings
from food_catalog.core.exceptions import CatalogStoreException, ConfigurationException
from food_catalog.core.logging import logger, set_log_level
from food_catalog.crawlers.http_client import shutdown_shared_http_client
from food_catalog.engine.orchestrator import RUN_MODES, RunOrchestrator
from food_catalog.engine.result import RunReport, RunState

EXIT_OK = 0
EXIT_ABORTED = 1
EXIT_CONFIG = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="food_catalog",
        description="Discover and extract a food catalog from the FatSecret Platform API",
    )
    parser.add_argument("--mode", choices=sorted(RUN_MODES), default="comprehensive", help="Run mode")
    parser.add_argument("--output-dir", help="Catalog output directory (default: OUTPUT_DIR)")
    parser.add_argument("--max-requests", type=int, help="Request ceiling for this run")
    parser.add_argument(
        "--use-brand-catalog",
        action="store_true",
        help="Seed brand candidates from food_brands.get.v2",
    )
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ...")
    return parser


def resolve_settings(args: argparse.Namespace, base: Optional[Settings] = None) -> Settings:
    """CLI 플래그로 이번 실행의 설정을 덮어씀"""
    base = base or default_settings
    update = {}
    if args.output_dir:
        update["output_dir"] = args.output_dir
    if args.max_requests is not None:
        update["budget_max_requests"] = args.max_requests
    if args.use_brand_catalog:
        update["use_brand_catalog"] = True
    if args.log_level:
        update["log_level"] = args.log_level
    s = base.model_copy(update=update)

    # ceiling은 safety margin보다 커야 함
    if s.budget_max_requests <= s.budget_safety_margin:
        raise ConfigurationException(
            "max_requests",
            {"max_requests": s.budget_max_requests, "safety_margin": s.budget_safety_margin},
        )
    if not s.has_credentials:
        raise ConfigurationException("FATSECRET_CLIENT_ID / FATSECRET_CLIENT_SECRET")
    return s


async def run_catalog(s: Settings, mode: str) -> RunReport:
    orchestrator = RunOrchestrator.from_settings(s, mode=mode)
    try:
        return await orchestrator.run()
    finally:
        await shutdown_shared_http_client()


def log_summary(report: RunReport) -> None:
    log = report.log
    if log is None:
        return
    logger.info(f"[RUN] Summary ({report.mode}):")
    logger.info(
        f"[RUN]   discovered: brands={log.brands_discovered}, restaurants={log.restaurants_discovered}, "
        f"categories={log.categories_discovered}, foods={log.foods_discovered}"
    )
    logger.info(f"[RUN]   new entities: {log.new_entities}")
    logger.info(
        f"[RUN]   extracted foods={log.total_foods_extracted}, "
        f"requests={log.api_requests_used}/{log.api_request_ceiling}"
    )
    if log.inconclusive_extractions:
        logger.warning(f"[RUN]   inconclusive: {', '.join(log.inconclusive_extractions)}")
    if log.truncated_extractions:
        logger.warning(f"[RUN]   truncated (retried next run): {', '.join(log.truncated_extractions)}")
    if log.budget_terminated:
        logger.warning("[RUN]   stopped early: request budget reached")


def main(argv: Optional[list] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.log_level:
        set_log_level(args.log_level)

    try:
        s = resolve_settings(args)
    except ConfigurationException as e:
        logger.error(f"[RUN] {e}")
        return EXIT_CONFIG

    try:
        report = asyncio.run(run_catalog(s, args.mode))
    except CatalogStoreException as e:
        logger.error(f"[RUN] {e}")
        return EXIT_ABORTED

    if report.state == RunState.ABORTED:
        return EXIT_ABORTED
    log_summary(report)
    return EXIT_OK
