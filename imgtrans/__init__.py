"""이미지 내 텍스트 번역 오버레이 서비스"""

__version__ = "0.1.0"
