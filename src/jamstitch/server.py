import asyncio
import json
from datetime import datetime
from pathlib import Path

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from .errors import StitchError
from .runner import StitchRunner
from .runs import RunTracker


class StitchMCPServer:

    def __init__(self, tracker: RunTracker | None = None):
        self._server = Server("jamstitch")
        self._tracker = tracker or RunTracker()
        self._register_handlers()

    def _register_handlers(self):
        self._server.list_tools()(self._list_tools)
        self._server.call_tool()(self._call_tool)

    async def _list_tools(self) -> list[Tool]:
        return [
            Tool(
                name="stitch_games",
                description=(
                    "Fetch every game in the project's games list, merge them into one "
                    "MakeCode Arcade project and publish it. Returns the share link. "
                    "Use publish=false with output_dir to only write the merged files."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "project_path": {
                            "type": "string",
                            "description": "Directory holding games.json (and optional .jamstitch/config.json)"
                        },
                        "publish": {
                            "type": "boolean",
                            "description": "Publish the bundle (default: true)"
                        },
                        "output_dir": {
                            "type": "string",
                            "description": "Also write the bundle files here (optional)"
                        }
                    },
                    "required": ["project_path"]
                }
            ),
            Tool(
                name="get_run_result",
                description="Get the status and result of a stitch run.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "run_id": {
                            "type": "string",
                            "description": "Run ID returned from stitch_games"
                        }
                    },
                    "required": ["run_id"]
                }
            ),
            Tool(
                name="list_recent_runs",
                description="List recent stitch runs and their status.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "limit": {
                            "type": "integer",
                            "description": "Max runs to return (default: 5)"
                        }
                    }
                }
            ),
            Tool(
                name="health_check",
                description="Check server health status.",
                inputSchema={
                    "type": "object",
                    "properties": {}
                }
            ),
        ]

    async def _call_tool(self, name: str, arguments: dict) -> list[TextContent]:
        if name == "stitch_games":
            return await asyncio.to_thread(self._handle_stitch_games, arguments)
        elif name == "get_run_result":
            return self._handle_get_run_result(arguments)
        elif name == "list_recent_runs":
            return self._handle_list_recent_runs(arguments)
        elif name == "health_check":
            return self._handle_health_check(arguments)
        else:
            return [TextContent(type="text", text=f"Unknown tool: {name}")]

    def _handle_stitch_games(self, arguments: dict) -> list[TextContent]:
        """Handle stitch_games tool call."""
        project_path = Path(arguments["project_path"])
        publish = arguments.get("publish", True)
        output_dir = Path(arguments["output_dir"]) if arguments.get("output_dir") else None

        if not project_path.exists():
            return [TextContent(type="text", text=f"Path does not exist: {project_path}")]
        if not publish and output_dir is None:
            return [TextContent(type="text", text="Nothing to do: publish=false needs an output_dir")]

        try:
            runner = StitchRunner(project_path, tracker=self._tracker)
            result = runner.stitch(publish=publish, output_dir=output_dir)
        except (StitchError, ValueError, OSError) as e:
            return [TextContent(type="text", text=json.dumps({
                "status": "failed",
                "error": str(e),
            }, indent=2))]

        return [TextContent(type="text", text=json.dumps({
            "status": "completed",
            "run_id": result.run_id,
            "share_url": result.share_url,
            "output_dir": str(result.output_dir) if result.output_dir else None,
            "files": list(result.bundle.files),
            "sprite_kinds": result.bundle.sprite_kinds,
            "status_bar_kinds": result.bundle.status_bar_kinds,
            "duration_seconds": round(result.duration_seconds, 3),
        }, indent=2))]

    def _handle_get_run_result(self, arguments: dict) -> list[TextContent]:
        """Handle get_run_result tool call."""
        run_id = arguments["run_id"]
        record = self._tracker.get_run(run_id)

        if not record:
            return [TextContent(type="text", text=f"Run not found: {run_id}")]

        duration = None
        if record.completed_at and record.started_at:
            duration = (record.completed_at - record.started_at).total_seconds()

        result = record.to_dict()
        result["duration_seconds"] = duration
        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    def _handle_list_recent_runs(self, arguments: dict) -> list[TextContent]:
        """Handle list_recent_runs tool call."""
        limit = arguments.get("limit", 5)
        records = self._tracker.get_recent_runs(limit)

        runs = []
        for record in records:
            runs.append({
                "run_id": record.run_id,
                "status": record.status.value,
                "games": record.games_path,
                "programs": record.program_count,
                "started": record.started_at.isoformat(),
                "share_url": record.share_url,
            })

        return [TextContent(type="text", text=json.dumps(runs, indent=2))]

    def _handle_health_check(self, arguments: dict) -> list[TextContent]:
        """Returns server status."""
        result = {
            "status": "ok",
            "timestamp": datetime.now().isoformat(),
            "version": "1.0.0"
        }
        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    async def run(self):
        async with stdio_server() as (read_stream, write_stream):
            await self._server.run(read_stream, write_stream, self._server.create_initialization_options())


def main():
    server = StitchMCPServer()
    asyncio.run(server.run())


if __name__ == "__main__":
    main()
