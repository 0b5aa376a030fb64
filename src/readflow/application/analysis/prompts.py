"""Prompt templates per analysis task."""

from readflow.domain.value_objects import AnalysisTask

_SUMMARY = """# Document summary

You are a document analysis expert. Write a detailed, structured summary
(800-1200 words) of the document below using these sections:

**Core theme** - background, goals, significance and scope.
**Key arguments** - the five most important points, each with its evidence.
**Key insights** - the most valuable non-obvious observations.
**Practical value** - how different readers can apply the content.
**Conclusions** - the overall takeaway and recommended actions.

---
Document content:
{content}

Follow the structure above exactly."""

_SYNTHESIS = """The following are summaries of consecutive parts of one document.
Combine them into a single complete summary that covers the whole document.

{content}"""

_KEY_POINTS = """# Key points

Extract the 5-10 most important points from the document below.
Write one point per line in this format:
💡 [point] - [why it matters / how to apply it]

---
Document content:
{content}"""

_OUTLINE = """# Document outline

Return ONLY a JSON array describing the document's section structure.
Each node has "id", "title", "level" (1 for top sections), an optional
"content" one-sentence overview and an optional "children" array.

Example:
[
  {{"id": "1", "title": "[Section title]", "level": 1, "content": "[Overview]",
    "children": [{{"id": "1.1", "title": "[Subsection]", "level": 2}}]}}
]

---
Document content:
{content}"""

_MIND_MAP = """# Mind map

Return ONLY a JSON object: root node -> 3-5 main branches -> 2-4 points per
branch. Every node has "id" and "label"; inner nodes have "children". Use the
document's concrete concepts, never generic labels such as "Overview".

Example:
{{
  "id": "root", "label": "[Main topic]",
  "children": [
    {{"id": "b1", "label": "[Branch]", "children": [{{"id": "b1_1", "label": "[Point]"}}]}}
  ]
}}

---
Document content:
{content}"""

_TEMPLATES = {
    AnalysisTask.SUMMARY: _SUMMARY,
    AnalysisTask.KEY_POINTS: _KEY_POINTS,
    AnalysisTask.OUTLINE: _OUTLINE,
    AnalysisTask.MIND_MAP: _MIND_MAP,
}


def bounded(content: str, limit: int) -> str:
    """Prefix of content, marked when cut."""
    if len(content) <= limit:
        return content
    return content[:limit] + "..."


def build_prompt(task: AnalysisTask, content: str, limit: int) -> str:
    return _TEMPLATES[task].format(content=bounded(content, limit))


def part_header(index: int, total: int) -> str:
    return f"[Part {index}/{total}]"


def synthesis_input(partial_summaries: list[str]) -> str:
    return _SYNTHESIS.format(content="\n\n".join(partial_summaries))
