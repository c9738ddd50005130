"""
Preview kernel test configuration.

Shared sample sources. Kernel tests are synchronous and need no event loop.
"""

from __future__ import annotations

import pytest

BUTTON_SOURCE = """\
import { Loader2 } from "lucide-react";
import { cn } from "@/lib/utils";

interface ButtonProps {
  /** Visible text */
  label: string;
  variant?: 'primary' | 'secondary';
  onClick?: () => void;
}

export function Button({ label, variant = 'primary', onClick }: ButtonProps) {
  return (
    <button className={cn("px-4 py-2 rounded-md", variant === "primary" && "bg-blue-600 text-white")} onClick={onClick}>
      {label}
    </button>
  );
}
"""

UTILS_SOURCE = """\
import { clsx } from "clsx";
import { twMerge } from "tailwind-merge";

export function cn(...inputs) {
  return twMerge(clsx(inputs));
}
"""


@pytest.fixture
def button_source() -> str:
    return BUTTON_SOURCE


@pytest.fixture
def source_map() -> dict[str, str]:
    """A tiny repository: one component and its utility module."""
    return {
        "components/ui/button.tsx": BUTTON_SOURCE,
        "lib/utils.ts": UTILS_SOURCE,
    }
