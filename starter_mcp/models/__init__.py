from .arguments import ConsultPackageJsonArguments, SumArguments

__all__ = ["ConsultPackageJsonArguments", "SumArguments"]
