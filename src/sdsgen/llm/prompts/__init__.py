from .prompts import ACTION_TYPES, ModuleDetailPrompt, ModuleListPrompt, RefinePrompt

__all__ = ["ACTION_TYPES", "ModuleDetailPrompt", "ModuleListPrompt", "RefinePrompt"]
