#!/usr/bin/env python3
"""
报价服务命令行工具

使用方法:
    bullion serve --port 8000
    bullion quote XAU XAG
    bullion quote BTC ETH --market crypto
    bullion history XAU --period 7d
    bullion catalog --market crypto
"""

import asyncio
from typing import List, Optional

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from bullion.data.catalog import HistoryPeriod
from bullion.utils.config import get_config
from bullion.utils.logger import setup_logger
from bullion.web.app import build_price_services
from bullion.web.config import WebConfig
from bullion.web.services.price_service import PriceCacheService

app = typer.Typer(help="贵金属与加密货币报价工具")
console = Console()


def _init_logging(level: Optional[str] = None) -> None:
    setup_logger(get_config().logging, level=level)


def _get_service(market: str) -> PriceCacheService:
    services = build_price_services(get_config())
    service = services.get(market.lower())
    if service is None:
        console.print(f"[red]未知市场: {market}，可选值: {', '.join(services)}[/red]")
        raise typer.Exit(code=1)
    return service


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="监听地址"),
    port: Optional[int] = typer.Option(None, help="监听端口"),
):
    """启动 Web 服务"""
    _init_logging()
    web_config = WebConfig()

    uvicorn.run(
        "bullion.web.app:create_app",
        factory=True,
        host=host or web_config.host,
        port=port or web_config.port,
        reload=web_config.debug,
        ssl_keyfile=web_config.ssl_keyfile or None,
        ssl_certfile=web_config.ssl_certfile or None,
    )


@app.command()
def quote(
    symbols: List[str] = typer.Argument(..., help="品种代码"),
    market: str = typer.Option("metals", "--market", "-m", help="市场 (metals / crypto)"),
):
    """查询实时报价（上游不可用时为兜底报价）"""
    _init_logging("WARNING")
    service = _get_service(market)

    async def _run():
        try:
            return await service.get_prices(symbols)
        finally:
            await service.close()

    prices = asyncio.run(_run())

    table = Table(title=f"{market} 报价")
    table.add_column("代码", style="cyan")
    table.add_column("名称")
    table.add_column("价格 (USD)", justify="right")
    table.add_column("24h", justify="right")
    table.add_column("单位")

    for price in prices:
        color = "green" if price.change_24h >= 0 else "red"
        table.add_row(
            price.symbol,
            price.name,
            f"{price.price:,.4f}",
            f"[{color}]{price.change_24h:+.2f}%[/{color}]",
            price.unit,
        )

    console.print(table)

    missing = {s.upper() for s in symbols} - {p.symbol for p in prices}
    if missing:
        console.print(f"[yellow]未找到: {', '.join(sorted(missing))}[/yellow]")


@app.command()
def history(
    symbol: str = typer.Argument(..., help="品种代码"),
    period: str = typer.Option("24h", "--period", "-p", help="周期 (24h, 7d, 30d, 1y)"),
    market: str = typer.Option("metals", "--market", "-m", help="市场 (metals / crypto)"),
):
    """输出模拟价格历史"""
    if period not in HistoryPeriod.values():
        console.print(f"[red]无效的周期: {period}，可选值: {', '.join(HistoryPeriod.values())}[/red]")
        raise typer.Exit(code=1)

    _init_logging("WARNING")
    service = _get_service(market)

    async def _run():
        try:
            return await service.get_price_history(symbol, period)
        finally:
            await service.close()

    points = asyncio.run(_run())
    if not points:
        console.print(f"[yellow]未找到 {symbol.upper()} 的数据[/yellow]")
        raise typer.Exit(code=1)

    table = Table(title=f"{symbol.upper()} {period} (模拟数据)")
    table.add_column("时间")
    table.add_column("价格", justify="right")
    for point in points:
        table.add_row(point.timestamp, f"{point.price:,.4f}")

    console.print(table)


@app.command()
def catalog(
    market: str = typer.Option("metals", "--market", "-m", help="市场 (metals / crypto)"),
):
    """列出支持的品种"""
    _init_logging("WARNING")
    service = _get_service(market)

    table = Table(title=f"{market} 品种目录")
    table.add_column("代码", style="cyan")
    table.add_column("名称")
    table.add_column("单位")
    table.add_column("参考价", justify="right")

    for entry in service.catalog:
        table.add_row(entry.symbol, entry.name, entry.unit, f"{entry.reference_price:,.2f}")

    console.print(table)


def main():
    app()


if __name__ == "__main__":
    main()
