"""
Main application entry point for the swap chat agent.
Rich and Typer command line: interactive chat, one-shot questions and the HTTP server.
"""

import asyncio
import json
from pathlib import Path
from typing import Optional
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.prompt import Prompt
from rich.markdown import Markdown
from rich.text import Text
from rich.align import Align
from rich import box

from swap_chat_agent.history import ChatHistory
from swap_chat_agent.models import Sender
from swap_chat_agent.system import SwapChatSystem, get_system

# Initialize Rich console and Typer app
console = Console()
app = typer.Typer(
    name="swap-chat-agent",
    help="💱 Chat with an AI assistant that builds token swap transactions",
    add_completion=False,
    rich_markup_mode="rich"
)


def create_header() -> Panel:
    """Create the application header."""
    header_text = Text.assemble(
        ("💱 ", "bold blue"),
        ("Swap Chat Agent", "bold white"),
        ("\nPowered by Claude & the 1inch aggregator", "dim white")
    )
    return Panel(
        Align.center(header_text),
        box=box.DOUBLE,
        border_style="cyan",
        padding=(1, 2)
    )


def create_welcome_message() -> Panel:
    """Create a welcome message panel."""
    welcome_md = """
## Welcome! 👋

Describe the swap you want and I will prepare the transactions for you to sign.

### Available Commands:
- `help` - Show available commands
- `info` - Display system information
- `clear` - Forget the conversation so far
- `quit`, `exit`, `bye` - Exit the application

### Example Requests:
- *Swap 0.1 ETH for USDC from 0x1111111111111111111111111111111111111111*
- *Sell 250 USDC for DAI*
"""
    return Panel(
        Markdown(welcome_md),
        title="[bold cyan]Getting Started[/bold cyan]",
        border_style="green"
    )


def show_system_info(system: SwapChatSystem) -> None:
    """Display system information."""
    info = system.get_system_info()

    table = Table(title="🔧 System Configuration", box=box.ROUNDED)
    table.add_column("Property", style="cyan", width=20)
    table.add_column("Value", style="white")

    table.add_row("Provider", f"[green]{info['config']['provider']}[/green]")
    table.add_row("Model", f"[green]{info['config']['model']}[/green]")
    table.add_row("Temperature", f"[blue]{info['config']['temperature']}[/blue]")
    table.add_row("Max Tokens", f"[magenta]{info['config']['max_tokens']}[/magenta]")
    table.add_row("Chain ID", f"[yellow]{info['config']['chain_id']}[/yellow]")
    table.add_row("Strict Parsing", "✅" if info['config']['strict_parsing'] else "❌")

    agents_table = Table(title="🤖 Agents", box=box.ROUNDED)
    agents_table.add_column("Agent Type", style="cyan")
    agents_table.add_column("Name", style="green")
    for agent_type, agent_name in info['agents'].items():
        agents_table.add_row(agent_type.replace("_", " ").title(), agent_name)

    tools_table = Table(title="🛠️ Tools", box=box.ROUNDED)
    tools_table.add_column("Tool", style="yellow")
    tools_table.add_column("Status", style="green")
    for tool in info['tools']:
        tools_table.add_row(tool, "✅ Available")

    console.print(table)
    console.print()
    console.print(agents_table)
    console.print()
    console.print(tools_table)


def show_help() -> None:
    """Display help information."""
    help_md = """
## 📋 Available Commands

- `help` - Show this help message
- `info` - Display system information
- `clear` - Forget the conversation so far
- `quit`, `exit`, `bye` - Exit the application

Always include the token to sell, the token to buy, the amount and your wallet address.
"""
    console.print(Panel(Markdown(help_md), title="[bold cyan]Help[/bold cyan]", border_style="blue"))


def format_turn_response(outcome: dict) -> None:
    """Display the outcome of one chat turn."""
    if not outcome["success"]:
        console.print(Panel(
            f"[red]Error: {outcome.get('error') or 'Unknown error'}[/red]",
            title="[bold red]❌ Error[/bold red]",
            border_style="red",
            padding=(1, 2)
        ))
        return

    result = outcome["result"]
    console.print(Panel(
        result.summarized_actions or "[dim]No summary was produced.[/dim]",
        title="[bold green]✅ Response[/bold green]",
        border_style="green",
        padding=(1, 2)
    ))

    for item in result.results_for_user:
        calls_table = Table(title=f"🧾 {item.action} transactions", box=box.SIMPLE)
        calls_table.add_column("#", style="cyan")
        calls_table.add_column("To", style="yellow")
        calls_table.add_column("Value", style="magenta")
        calls_table.add_column("Data", style="white", overflow="ellipsis", max_width=40)

        data = item.result if isinstance(item.result, dict) else {}
        for index, call in enumerate(data.get("calls", []), 1):
            calls_table.add_row(str(index), call.get("to", ""), call.get("value", ""), call.get("data", ""))

        console.print(calls_table)
        if data.get("metadata"):
            metadata = data["metadata"]
            console.print(
                f"[dim]{metadata.get('sellAmount')} {metadata.get('sellToken')} → "
                f"{metadata.get('buyAmount')} {metadata.get('buyToken')}[/dim]"
            )


def build_system(config: str) -> SwapChatSystem:
    """Initialize the system with a progress spinner."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True
    ) as progress:
        task = progress.add_task("🚀 Initializing Swap Chat Agent...", total=None)
        system = get_system(config)
        progress.update(task, completed=True)
    return system


def apply_log_level(system: SwapChatSystem, log_level: Optional[str]) -> None:
    """Override the configured log level for this run."""
    if not log_level:
        return
    try:
        system.logging_manager.update_log_level(log_level)
    except ValueError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(1)


def ensure_config(config: str) -> None:
    if not Path(config).exists():
        console.print(Panel(
            f"[red]❌ Configuration file not found: {config}[/red]\n\n[yellow]Please ensure the configuration file exists and is readable.[/yellow]",
            title="[bold red]Configuration Error[/bold red]",
            border_style="red"
        ))
        raise typer.Exit(1)


async def interactive_mode(system: SwapChatSystem) -> None:
    """Run the interactive chat."""
    history = ChatHistory(system.config.agent.max_history)

    console.clear()
    console.print(create_header())
    console.print()
    console.print(create_welcome_message())
    console.print()

    while True:
        try:
            user_input = Prompt.ask(
                "\n[bold cyan]💬 You[/bold cyan]",
                default="",
                show_default=False
            ).strip()

            if not user_input:
                console.print("[yellow]⚠️ Please enter a message or command.[/yellow]")
                continue

            command = user_input.lower()
            if command in ['quit', 'exit', 'bye']:
                console.print(Panel("[bold green]👋 Goodbye![/bold green]", border_style="green"))
                break
            if command == 'help':
                show_help()
                continue
            if command == 'info':
                show_system_info(system)
                continue
            if command == 'clear':
                history.clear()
                console.print("[green]Conversation cleared.[/green]")
                continue

            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
                transient=True
            ) as progress:
                task = progress.add_task("🔄 Working on it...", total=None)
                outcome = await system.process_message(user_input, history.get_history())
                progress.update(task, completed=True)

            console.print()
            format_turn_response(outcome)

            history.add(Sender.USER, user_input)
            if outcome["success"]:
                history.add(Sender.AGENT, outcome["result"].summarized_actions)

        except KeyboardInterrupt:
            console.print(Panel("[bold green]👋 Goodbye![/bold green]", border_style="green"))
            break


@app.command()
def chat(
    log_level: Optional[str] = typer.Option(None, "--log-level", "-l", help="Override the configured log level"),
    config: str = typer.Option("config.yaml", "--config", "-c", help="Path to configuration file")
):
    """Start an interactive chat session."""
    ensure_config(config)
    try:
        system = build_system(config)
        apply_log_level(system, log_level)
        asyncio.run(interactive_mode(system))
    except KeyboardInterrupt:
        raise typer.Exit(0)
    except typer.Exit:
        raise
    except Exception as e:
        console.print(Panel(
            f"[red]❌ Failed to initialize system: {str(e)}[/red]\n\n[yellow]Please check your configuration and try again.[/yellow]",
            title="[bold red]Initialization Error[/bold red]",
            border_style="red"
        ))
        raise typer.Exit(1)


@app.command()
def ask(
    message: str = typer.Argument(..., help="Message to send to the agent"),
    log_level: Optional[str] = typer.Option(None, "--log-level", "-l", help="Override the configured log level"),
    history_file: Optional[Path] = typer.Option(
        None, "--history", "-H", help="JSON file with previous turns ([{\"sender\": ..., \"content\": ...}])"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the raw response payload"),
    config: str = typer.Option("config.yaml", "--config", "-c", help="Path to configuration file")
):
    """Send a single message and print the result."""
    ensure_config(config)
    history = json.loads(history_file.read_text(encoding="utf-8")) if history_file else []
    system = build_system(config)
    apply_log_level(system, log_level)
    outcome = asyncio.run(system.process_message(message, history))

    if as_json:
        payload = {"result": outcome["result"].to_payload()} if outcome["success"] else {"error": outcome["error"]}
        console.print_json(json.dumps(payload))
    else:
        format_turn_response(outcome)

    if not outcome["success"]:
        raise typer.Exit(1)


@app.command()
def serve(
    log_level: Optional[str] = typer.Option(None, "--log-level", "-l", help="Override the configured log level"),
    host: Optional[str] = typer.Option(None, "--host", help="Interface to bind (defaults to config)"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to listen on (defaults to config)"),
    config: str = typer.Option("config.yaml", "--config", "-c", help="Path to configuration file")
):
    """Serve the chat endpoint over HTTP."""
    from swap_chat_agent.server import create_app

    ensure_config(config)
    system = build_system(config)
    apply_log_level(system, log_level)
    flask_app = create_app(system)
    bind_host = host or system.config.server.host
    bind_port = port or system.config.server.port
    console.print(Panel(f"[green]Listening on http://{bind_host}:{bind_port}/api/agent[/green]", border_style="green"))
    flask_app.run(host=bind_host, port=bind_port)


@app.command()
def info(
    config: str = typer.Option("config.yaml", "--config", "-c", help="Path to configuration file")
):
    """Show the configured agents and tools."""
    ensure_config(config)
    show_system_info(build_system(config))


if __name__ == "__main__":
    app()
