from typing import Union

from pydantic import Field

from ..agent_core.registry import CommandSpec, ModuleDescriptor, PluginContext
from ..agent_core.schemas import BaseSchema, Capability


class FibonacciArgs(BaseSchema):
    n: int = Field(le=10000, description="Index in the Fibonacci sequence")


class IsPrimeArgs(BaseSchema):
    num: int = Field(le=10**12, description="Number to test")


class FactorialArgs(BaseSchema):
    n: int = Field(le=2000, description="Non-negative integer")


def fibonacci(n: int) -> int:
    if n <= 0:
        return 0
    a, b = 0, 1
    for _ in range(n - 1):
        a, b = b, a + b
    return b


def is_prime(num: int) -> bool:
    if num <= 1:
        return False
    if num <= 3:
        return True
    if num % 2 == 0 or num % 3 == 0:
        return False
    i = 5
    while i * i <= num:
        if num % i == 0 or num % (i + 2) == 0:
            return False
        i += 6
    return True


def factorial(n: int) -> Union[int, str]:
    if n < 0:
        return "Error: Negative number"
    result = 1
    for i in range(2, n + 1):
        result *= i
    return result


def create_module(ctx: PluginContext) -> ModuleDescriptor:
    return ModuleDescriptor(
        id="math",
        name="Math Module",
        capabilities=[Capability.read],
        commands={
            "fibonacci": CommandSpec("Calculates the nth Fibonacci number", fibonacci, FibonacciArgs),
            "isPrime": CommandSpec("Checks if a number is prime", is_prime, IsPrimeArgs),
            "factorial": CommandSpec("Calculates factorial of a number", factorial, FactorialArgs),
        },
    )
