TYPE_FILTER_ALL = "all"

NODE_TYPE_LABELS: dict[str, str] = {
    "input": "Input",
    "output": "Output",
    "error": "Error",
    "skill": "Skill",
    "auto": "Auto",
}

LABEL_FALLBACK = "Node"

COMMAND_PROMPT = "$ "
