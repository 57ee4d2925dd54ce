"""List screens of the admin console."""

from admin_console.screens.base import ListScreen
from admin_console.screens.brands import BrandFilters, BrandForm, BrandsScreen
from admin_console.screens.coverage import CoverageAreas, coverage_level, format_coverage
from admin_console.screens.fpos import DocumentForm, FpoFilters, FpoForm, FposScreen
from admin_console.screens.products import ProductFilters, ProductsScreen, ReferenceData
from admin_console.screens.providers import ProviderFilters, ProviderForm, ProvidersScreen
from admin_console.screens.users import UserFilters, UserForm, UsersScreen

__all__ = [
    "BrandFilters",
    "BrandForm",
    "BrandsScreen",
    "CoverageAreas",
    "DocumentForm",
    "FpoFilters",
    "FpoForm",
    "FposScreen",
    "ListScreen",
    "ProductFilters",
    "ProductsScreen",
    "ProviderFilters",
    "ProviderForm",
    "ProvidersScreen",
    "ReferenceData",
    "UserFilters",
    "UserForm",
    "UsersScreen",
    "coverage_level",
    "format_coverage",
]
