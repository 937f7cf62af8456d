# app/agent/graph.py
from langgraph.graph import START, END, StateGraph

from app.agent.state import ScanState
from app.agent.nodes import (
    extract_node, normalize_node, enrich_node, route_after_extract, route_after_normalize,
)

builder = StateGraph(ScanState)

builder.add_node("extract", extract_node)
builder.add_node("normalize", normalize_node)
builder.add_node("enrich", enrich_node)

builder.add_edge(START, "extract")

builder.add_conditional_edges("extract", route_after_extract, {
    "normalize": "normalize",
    "failed": END,
})
builder.add_conditional_edges("normalize", route_after_normalize, {
    "enrich": "enrich",
    "done": END,
})
builder.add_edge("enrich", END)

# single pass, no interrupts: nothing to checkpoint
scan_graph = builder.compile()
