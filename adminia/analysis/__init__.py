from adminia.analysis.analyzer import DocumentAnalyzer
from adminia.analysis.base import BaseDocumentAnalyzer
from adminia.analysis.factory import AnalyzerFactory
from adminia.analysis.models import AnalysisResult

__all__ = ["AnalysisResult", "AnalyzerFactory", "BaseDocumentAnalyzer", "DocumentAnalyzer"]
