from .pid import PIDCoefficients, PIDController

__all__ = ["PIDCoefficients", "PIDController"]
