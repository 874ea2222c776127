"""Question answering over indexed chunks: term matching, boosting, ranking and evidence."""