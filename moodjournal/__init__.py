"""감정 일기(프랑스어) 코어: 키워드 감정 분석, 녹음 세션, 음성 인식, 미디어 업로드."""

__version__ = "0.1.0"
