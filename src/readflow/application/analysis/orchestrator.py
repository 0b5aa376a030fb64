"""AI orchestration: prompts, chunk fan-out and response normalization per task."""

import asyncio
import logging
import re

from readflow.application.analysis.json_repair import expect_array, expect_object
from readflow.application.analysis.mind_map_merger import assign_unique_ids, merge_mind_maps
from readflow.application.analysis.prompts import build_prompt, part_header, synthesis_input
from readflow.application.analysis.sanitizer import sanitize_aggressive, sanitize_basic
from readflow.application.dto.analysis_config import AnalysisConfig
from readflow.application.dto.completion import CompletionRequest, CompletionResponse
from readflow.application.ports import Chunker, CompletionGateway
from readflow.domain.entities import Chunk, MindMapNode, OutlineNode
from readflow.domain.exceptions import AITaskFailed, JSONRepairExhausted, Timeout
from readflow.domain.value_objects import AnalysisTask

logger = logging.getLogger(__name__)

_PREAMBLES = ("以下是", "关键要点", "here are", "key points", "the following")
_SKIPPED_PREFIXES = ("#", "---")
_BULLET = re.compile(r"^(?:💡|[-*•·]|\d+[.)、])\s*")
_MIN_KEY_POINT_CHARS = 10


def parse_key_points(response: str, limit: int = 10) -> list[str]:
    """One key point per meaningful line of the response."""
    points: list[str] = []
    for line in response.split("\n"):
        line = line.strip()
        if not line or line.startswith(_SKIPPED_PREFIXES):
            continue
        if line.lower().startswith(_PREAMBLES):
            continue
        line = _BULLET.sub("", line).strip()
        if len(line) > _MIN_KEY_POINT_CHARS:
            points.append(line)
        if len(points) >= limit:
            break
    return points


def _text(value: object) -> str:
    return str(value).strip() if value is not None else ""


def _normalize_outline_items(items: list, level: int) -> list[OutlineNode]:
    nodes: list[OutlineNode] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        title = _text(item.get("title") or item.get("label"))
        if not title:
            continue
        try:
            node_level = max(int(item.get("level", level)), 1)
        except (TypeError, ValueError):
            node_level = level
        content = item.get("content")
        children = item.get("children")
        nodes.append(
            OutlineNode(
                id=_text(item.get("id")),
                title=title,
                level=node_level,
                content=_text(content) if content is not None else None,
                children=_normalize_outline_items(children, node_level + 1)
                if isinstance(children, list)
                else [],
            )
        )
    return nodes


def _assign_outline_ids(nodes: list[OutlineNode]) -> None:
    seen: set[str] = set()

    def _visit(node: OutlineNode, path: str) -> None:
        if not node.id or node.id in seen:
            node.id = f"section-{path}"
            suffix = 1
            while node.id in seen:
                suffix += 1
                node.id = f"section-{path}-{suffix}"
        seen.add(node.id)
        for i, child in enumerate(node.children, start=1):
            _visit(child, f"{path}.{i}")

    for i, node in enumerate(nodes, start=1):
        _visit(node, str(i))


def normalize_outline(items: list) -> list[OutlineNode]:
    """Outline nodes from parsed JSON; untitled entries dropped, ids made unique."""
    nodes = _normalize_outline_items(items, 1)
    _assign_outline_ids(nodes)
    return nodes


def _normalize_mind_map_node(data: dict) -> MindMapNode | None:
    label = _text(data.get("label") or data.get("title") or data.get("name"))
    if not label:
        return None
    children = data.get("children")
    return MindMapNode(
        id=_text(data.get("id")),
        label=label,
        children=[
            child
            for child in (
                _normalize_mind_map_node(c) for c in children if isinstance(c, dict)
            )
            if child is not None
        ]
        if isinstance(children, list)
        else [],
    )


def normalize_mind_map(data: dict) -> MindMapNode:
    """Mind map tree from parsed JSON. Raises JSONRepairExhausted when there is no usable root."""
    root = _normalize_mind_map_node(data)
    if root is None:
        raise JSONRepairExhausted("Mind map root has no label")
    if not root.id:
        root.id = "root"
    return assign_unique_ids(root)


class AIOrchestrator:
    """Runs the four analysis tasks against a completion gateway."""

    def __init__(
        self,
        gateway: CompletionGateway,
        chunker: Chunker,
        config: AnalysisConfig | None = None,
    ) -> None:
        self._gateway = gateway
        self._chunker = chunker
        self._config = config or AnalysisConfig()

    async def summarize(self, text: str) -> str:
        """Direct summary for short texts; partial summaries plus one synthesis otherwise."""
        cfg = self._config
        if len(text) <= cfg.long_document_threshold:
            return await self._complete(
                AnalysisTask.SUMMARY, text, cfg.summary_max_tokens, cfg.summary_input_chars
            )

        chunks = self._chunker.split(text, cfg.chunk_size)
        logger.info("Summarizing %d chars in %d parts", len(text), len(chunks))
        results = await asyncio.gather(
            *(self._partial_summary(c) for c in chunks),
            return_exceptions=True,
        )
        partials: list[str] = []
        for chunk, result in zip(chunks, results):
            if isinstance(result, AITaskFailed):
                logger.warning("Partial summary %d/%d dropped: %s", chunk.index + 1, chunk.total_chunks, result)
                continue
            if isinstance(result, BaseException):
                raise result
            partials.append(result)
        if not partials:
            raise AITaskFailed(AnalysisTask.SUMMARY, f"all {len(chunks)} partial summaries failed")

        return await self._complete(
            AnalysisTask.SUMMARY,
            synthesis_input(partials),
            cfg.summary_max_tokens,
            cfg.synthesis_input_chars,
        )

    async def _partial_summary(self, chunk: Chunk) -> str:
        content = f"{part_header(chunk.index + 1, chunk.total_chunks)}\n{chunk.text}"
        return await self._complete(AnalysisTask.SUMMARY, content, self._config.summary_max_tokens)

    async def extract_key_points(self, text: str) -> list[str]:
        cfg = self._config
        response = await self._complete(
            AnalysisTask.KEY_POINTS, text, cfg.key_points_max_tokens, cfg.key_points_input_chars
        )
        points = parse_key_points(response, cfg.key_points_limit)
        logger.info("Extracted %d key points", len(points))
        return points

    async def generate_outline(self, text: str) -> list[OutlineNode]:
        """Outline from the document prefix. Raises JSONRepairExhausted on unusable responses."""
        cfg = self._config
        response = await self._complete(
            AnalysisTask.OUTLINE, text, cfg.outline_max_tokens, cfg.outline_input_chars
        )
        nodes = normalize_outline(expect_array(response))
        if not nodes:
            raise JSONRepairExhausted("Outline contained no titled sections", cleaned=response[:500])
        return nodes

    async def generate_mind_map(self, source: str) -> MindMapNode:
        """Mind map from the summary; long sources are mapped per chunk and merged."""
        cfg = self._config
        if len(source) <= cfg.chunk_size:
            response = await self._complete(
                AnalysisTask.MIND_MAP, source, cfg.mind_map_max_tokens, cfg.mind_map_input_chars
            )
            return normalize_mind_map(expect_object(response))

        chunks = self._chunker.split(source, cfg.chunk_size)
        logger.info("Generating mind map from %d parts", len(chunks))
        results = await asyncio.gather(
            *(self._chunk_mind_map(c) for c in chunks),
            return_exceptions=True,
        )
        maps: list[MindMapNode] = []
        for chunk, result in zip(chunks, results):
            if isinstance(result, (AITaskFailed, JSONRepairExhausted)):
                logger.warning("Mind map part %d/%d skipped: %s", chunk.index + 1, chunk.total_chunks, result)
                continue
            if isinstance(result, BaseException):
                raise result
            maps.append(result)
        if not maps:
            raise AITaskFailed(AnalysisTask.MIND_MAP, f"all {len(chunks)} chunk mind maps failed")
        return merge_mind_maps(maps, cfg.mind_map_max_children, cfg.mind_map_max_depth)

    async def _chunk_mind_map(self, chunk: Chunk) -> MindMapNode:
        content = f"{part_header(chunk.index + 1, chunk.total_chunks)}\n{chunk.text}"
        response = await self._complete(
            AnalysisTask.MIND_MAP, content, self._config.mind_map_chunk_max_tokens
        )
        return normalize_mind_map(expect_object(response))

    async def _complete(
        self,
        task: AnalysisTask,
        content: str,
        max_tokens: int,
        input_limit: int | None = None,
    ) -> str:
        """One task request with the single content-policy retry."""
        cfg = self._config
        limit = len(content) if input_limit is None else input_limit
        prompt = build_prompt(task, sanitize_basic(content, cfg.flagged_terms), limit)
        response = await self._call(task, prompt, max_tokens)
        if response.success and response.data is not None:
            return response.data

        error = response.error or "empty response"
        if cfg.content_policy_marker not in error:
            raise AITaskFailed(task, error)

        logger.warning("Content policy rejected %s request, retrying with stricter sanitization", task)
        safer = sanitize_aggressive(content, cfg.flagged_terms, cfg.aggressive_max_chars)
        response = await self._call(task, build_prompt(task, safer, limit), max_tokens)
        if response.success and response.data is not None:
            return response.data
        raise AITaskFailed(task, response.error or "empty response")

    async def _call(self, task: AnalysisTask, prompt: str, max_tokens: int) -> CompletionResponse:
        request = CompletionRequest(prompt=prompt, max_tokens=max_tokens, task_type=task)
        try:
            return await asyncio.wait_for(
                self._gateway.complete(request),
                timeout=self._config.ai_call_timeout,
            )
        except TimeoutError as e:
            raise AITaskFailed(task, Timeout(f"{task} request", self._config.ai_call_timeout)) from e
