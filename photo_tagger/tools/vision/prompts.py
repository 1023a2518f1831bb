# photo_tagger/tools/vision/prompts.py

from __future__ import annotations


def material_prompt(file: str) -> str:
    """Extraction-only prompt: objects and text, no classification."""
    return (
        "次の工事現場写真について、写っている物体と文字情報だけを抽出せよ。推測や分類は不要。\n"
        "Output ONLY a JSON object (no code fences, no prose):\n"
        f'{{"file":"{file}","objects":[{{"label":"...","bbox":[x0,y0,x1,y1],"area_ratio":0.0}}],'
        '"board_text":"","other_text":"","notes":""}\n'
        f"対象ファイル: {file}\n"
        "objects: 写っている物体（例: タイヤローラー, アスファルト, 作業員, 看板）。"
        "bbox は画像幅・高さで正規化した 0〜1 の値、area_ratio は画像に占める面積比。\n"
        "board_text: 黒板があればその文字をそのまま。\n"
        "other_text: 黒板以外の文字（標識、銘板、型式、証票、ナンバーなど）。\n"
        "notes: 事実ベースの補足（任意）。\n"
    )
