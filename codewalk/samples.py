"""Built-in Go sample programs and the precompiled modules they map to."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Sample:
    name: str
    title: str
    code: str
    module: str  # module basename under the configured module directory
    expected_output: str = ""


HELLO = Sample(
    name="hello",
    title="Hello World",
    module="hello",
    code="""package main

import "fmt"

func main() {
    fmt.Println("Hello, World!")
}
""",
    expected_output="Hello, World!\n",
)

FIBONACCI = Sample(
    name="fibonacci",
    title="Fibonacci",
    module="fibonacci",
    code="""package main

import "fmt"

func fibonacci(n int) int {
    if n <= 1 {
        return n
    }
    return fibonacci(n-1) + fibonacci(n-2)
}

func main() {
    for i := 0; i < 10; i++ {
        fmt.Printf("fibonacci(%d) = %d\\n", i, fibonacci(i))
    }
}
""",
    expected_output="".join(
        f"fibonacci({i}) = {n}\n" for i, n in enumerate([0, 1, 1, 2, 3, 5, 8, 13, 21, 34])
    ),
)

LOOP = Sample(
    name="loop",
    title="Loop",
    module="loop",
    code="""package main

import "fmt"

func main() {
    for i := 1; i <= 5; i++ {
        fmt.Printf("Count: %d\\n", i)
    }
    fmt.Println("Done!")
}
""",
    expected_output="".join(f"Count: {i}\n" for i in range(1, 6)) + "Done!\n",
)

SAMPLES: dict[str, Sample] = {s.name: s for s in (HELLO, FIBONACCI, LOOP)}


def get_sample(name: str) -> Sample:
    try:
        return SAMPLES[name]
    except KeyError:
        raise ValueError(f"Unknown sample {name!r}; choose from {', '.join(SAMPLES)}") from None
